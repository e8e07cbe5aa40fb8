"""
Real-time monitoring dashboard for a replica cluster.

This script polls the health and map state of every replica and reports
whether their states have converged.
"""

import argparse
import os
import time
from datetime import datetime

import requests


DEFAULT_REPLICA_URLS = [
    'http://localhost:8001',
    'http://localhost:8002',
    'http://localhost:8003'
]


def clear_screen():
    """Clear the terminal screen."""
    os.system('cls' if os.name == 'nt' else 'clear')


def get_replica_status(url: str) -> dict:
    """
    Get the status of a replica.

    Args:
        url: Base URL of the replica

    Returns:
        Dictionary with status information
    """
    result = {
        'url': url,
        'online': False,
        'health': None,
        'summary': None,
        'state': None,
        'error': None
    }

    try:
        health_response = requests.get(f"{url}/health", timeout=2)
        if health_response.status_code == 200:
            result['online'] = True
            result['health'] = health_response.json()

        summary_response = requests.get(f"{url}/crdt/summary", timeout=2)
        if summary_response.status_code == 200:
            result['summary'] = summary_response.json()

        state_response = requests.get(f"{url}/crdt/state", timeout=2)
        if state_response.status_code == 200:
            result['state'] = state_response.json()

    except requests.exceptions.ConnectionError:
        result['error'] = "Connection refused"
    except requests.exceptions.Timeout:
        result['error'] = "Request timeout"
    except requests.exceptions.RequestException as e:
        result['error'] = str(e)
    except ValueError:
        result['error'] = "Invalid JSON response"

    return result


def print_replica_status(status: dict):
    url = status['url']
    online = status['online']

    status_str = "\033[92mONLINE\033[0m" if online else "\033[91mOFFLINE\033[0m"
    print(f"\n{'='*60}")
    print(f"Replica: {url}")
    print(f"Status: {status_str}")

    if not online:
        if status['error']:
            print(f"Error: {status['error']}")
        return

    if status['health']:
        print(f"Node ID: {status['health'].get('node_id', 'N/A')}")

    if status['summary']:
        summary = status['summary']
        print(f"\n--- Map State ---")
        print(f"Live entries: {summary.get('entries', 'N/A')}")
        print(f"Tombstones: {summary.get('tombstones', 'N/A')}")
        keys = summary.get('keys', [])
        print(f"Keys: {', '.join(keys) if keys else '(none)'}")


def states_converged(statuses: list) -> bool:
    """True when every online replica reports the same map state."""
    states = [s['state'] for s in statuses if s['online'] and s['state'] is not None]
    return len(states) > 0 and all(state == states[0] for state in states)


def print_dashboard(urls: list):
    clear_screen()

    print("=" * 60)
    print("       REPLICA CLUSTER MONITOR")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Monitoring {len(urls)} replicas")

    statuses = [get_replica_status(url) for url in urls]
    for status in statuses:
        print_replica_status(status)

    online_count = sum(1 for s in statuses if s['online'])
    converged = "\033[92mYES\033[0m" if states_converged(statuses) else "\033[93mNOT YET\033[0m"
    print(f"\n{'='*60}")
    print(f"Cluster Health: {online_count}/{len(urls)} replicas online")
    print(f"Converged: {converged}")
    print("=" * 60)
    print("\nPress Ctrl+C to exit")


def main():
    parser = argparse.ArgumentParser(description="Replica cluster monitor")
    parser.add_argument("urls", nargs="*", default=DEFAULT_REPLICA_URLS, help="Replica base URLs")
    parser.add_argument("--interval", type=float, default=5.0, help="Refresh interval in seconds")
    args = parser.parse_args()

    print("Starting replica cluster monitor...")
    print(f"Monitoring URLs: {args.urls}")

    try:
        while True:
            print_dashboard(args.urls)
            time.sleep(args.interval)
    except KeyboardInterrupt:
        print("\n\nMonitoring stopped. Goodbye!")


if __name__ == "__main__":
    main()
