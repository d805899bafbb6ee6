#!/usr/bin/env python3
"""
Waypoint mission CLI

Converts CSV waypoint missions to binary mission files and uploads
them to the mission cloud service.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from ..api.client import ApiError, MissionApiClient
from ..config import Config
from ..errors import MissionError
from ..mission.binary import encode
from ..mission.csv_format import read_csv_file
from ..mission.models import Mission
from ..utils.logger import setup_logging

logger = logging.getLogger(__name__)


# ANSI colors
class Colors:
    RESET = '\033[0m'
    BOLD = '\033[1m'
    RED = '\033[91m'
    GREEN = '\033[92m'
    CYAN = '\033[96m'


def color(text: str, c: str) -> str:
    """Apply color to text"""
    return f"{c}{text}{Colors.RESET}"


def print_error(msg: str):
    """Print error message"""
    print(color(f"Error: {msg}", Colors.RED), file=sys.stderr)


def print_success(msg: str):
    """Print success message"""
    print(color(msg, Colors.GREEN))


def load_mission(path: str, config: Config) -> Mission:
    """Read a CSV mission with the configured mission settings"""
    return read_csv_file(path, config.mission.to_mission_config())


def login(config: Config) -> MissionApiClient:
    if not config.api.username or not config.api.password:
        raise ApiError("api.username and api.password must be configured")

    client = MissionApiClient(config.api)
    client.login(config.api.username, config.api.password)
    return client


# ==================== Commands ====================

def cmd_convert(config: Config, args) -> int:
    """Convert a CSV mission to a binary mission file"""
    mission = load_mission(args.input, config)
    data = encode(mission)

    Path(args.output).write_bytes(data)
    print_success(f"Wrote {len(data)} bytes to {args.output}")
    return 0


def cmd_summary(config: Config, args) -> int:
    """Show a summary of a CSV mission"""
    mission = load_mission(args.input, config)
    summary = mission.get_summary()

    print()
    print(color("=== Mission Summary ===", Colors.BOLD))
    print(f"  Waypoints:     {summary['waypoint_count']}")
    print(f"  POIs:          {summary['poi_count']}")
    print(f"  Actions:       {summary['action_count']}")
    print(f"  Path length:   {summary['path_length_m']:.1f} m")
    print(f"  Heading mode:  {summary['heading_mode']}")
    print(f"  Finish action: {summary['finish_action']}")
    return 0


def cmd_upload(config: Config, args) -> int:
    """Upload a CSV mission to the cloud service"""
    mission = load_mission(args.input, config)
    client = login(config)

    object_id = client.upload(mission, args.name)
    client.sync_devices()

    print_success(f"Uploaded '{args.name}' ({object_id})")
    return 0


def cmd_missions(config: Config, args) -> int:
    """List uploaded missions"""
    client = login(config)
    missions = client.missions()

    if not missions:
        print("No missions stored")
        return 0

    print(color(f"{'ID':<12} {'NAME':<30} LOCATION", Colors.CYAN))
    for m in missions:
        print(f"{m.object_id:<12} {m.name:<30} "
              f"{m.location.latitude:.6f}, {m.location.longitude:.6f}")
    return 0


def cmd_delete(config: Config, args) -> int:
    """Delete an uploaded mission"""
    client = login(config)
    client.delete_mission(args.object_id)
    print_success(f"Deleted mission {args.object_id}")
    return 0


# ==================== Main ====================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='waypoint-mission',
        description='Waypoint mission converter',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  waypoint-mission convert flight.csv flight.bin       Convert a mission
  waypoint-mission summary flight.csv                  Show mission summary
  waypoint-mission upload flight.csv --name "Survey"   Upload a mission
  waypoint-mission missions                            List uploaded missions
"""
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Path to configuration file (YAML)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Log file path"
    )

    subparsers = parser.add_subparsers(dest='command', help='Command')

    # convert
    p = subparsers.add_parser('convert', help='Convert a CSV mission to a binary file')
    p.add_argument('input', help='Input CSV file')
    p.add_argument('output', help='Output mission file')

    # summary
    p = subparsers.add_parser('summary', help='Show a CSV mission summary')
    p.add_argument('input', help='Input CSV file')

    # upload
    p = subparsers.add_parser('upload', help='Upload a CSV mission')
    p.add_argument('input', help='Input CSV file')
    p.add_argument('-n', '--name', required=True, help='Mission name')

    # missions
    subparsers.add_parser('missions', help='List uploaded missions')

    # delete
    p = subparsers.add_parser('delete', help='Delete an uploaded mission')
    p.add_argument('object_id', help='Mission object id')

    return parser


COMMANDS = {
    'convert': cmd_convert,
    'summary': cmd_summary,
    'upload': cmd_upload,
    'missions': cmd_missions,
    'delete': cmd_delete,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the waypoint-mission CLI"""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config = Config.load(args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print_error(str(e))
        return 1

    level = logging.DEBUG if args.verbose else config.logging.level
    setup_logging(level=level, log_file=args.log_file or config.logging.file or None)

    try:
        return COMMANDS[args.command](config, args)
    except FileNotFoundError as e:
        print_error(f"File not found: {e.filename}")
    except (MissionError, ApiError, ValueError) as e:
        logger.debug("Command failed", exc_info=True)
        print_error(str(e))
    return 1


if __name__ == '__main__':
    sys.exit(main())
