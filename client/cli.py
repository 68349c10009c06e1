import argparse
import logging
import os
import sys

from client.lease_client import LeaseClient, LeaseClientError, LeaseKeeper

# Configure Logging
logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger("idlease")

DEFAULT_URL = os.environ.get("IDLEASE_URL", "http://localhost:3000")


def cmd_next(args):
    """Lease one id and print it."""
    client = LeaseClient(args.url)
    try:
        lease_id, exp = client.next()
    except (LeaseClientError, RuntimeError) as e:
        logger.error(f"Could not lease an id: {e}")
        sys.exit(1)
    print(lease_id)
    logger.info(f"Id {lease_id} expires at {exp}")


def cmd_heartbeat(args):
    """Renew an id once."""
    client = LeaseClient(args.url)
    try:
        exp = client.heartbeat(args.id)
    except (LeaseClientError, RuntimeError) as e:
        logger.error(f"Heartbeat failed: {e}")
        sys.exit(1)
    logger.info(f"Id {args.id} renewed until {exp}")


def cmd_hold(args):
    """Lease an id and keep it alive until interrupted."""
    keeper = LeaseKeeper(LeaseClient(args.url), args.interval)
    try:
        lease_id = keeper.start()
    except (LeaseClientError, RuntimeError) as e:
        logger.error(f"Could not lease an id: {e}")
        sys.exit(1)
    print(lease_id, flush=True)

    try:
        keeper.lost.wait()
    except KeyboardInterrupt:
        keeper.stop()
        return
    sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(description="idlease client")
    parser.add_argument("--url", default=DEFAULT_URL, help=f"Server URL (default: {DEFAULT_URL})")
    subparsers = parser.add_subparsers(dest="command", required=True)

    p_next = subparsers.add_parser("next", help="Lease a new id")
    p_next.set_defaults(func=cmd_next)

    p_heartbeat = subparsers.add_parser("heartbeat", help="Renew a held id")
    p_heartbeat.add_argument("id", type=int, help="Id to renew")
    p_heartbeat.set_defaults(func=cmd_heartbeat)

    p_hold = subparsers.add_parser("hold", help="Lease an id and keep it alive")
    p_hold.add_argument("--interval", type=int, default=500, help="Heartbeat interval in ms (default: 500)")
    p_hold.set_defaults(func=cmd_hold)

    args = parser.parse_args(argv)
    args.func(args)


if __name__ == "__main__":
    main()
