#!/usr/bin/env python3
"""
LAN Device Monitor - command line front end.
Lists the devices on the local network and reports them as they come and go.
"""
import argparse
import dataclasses
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from config import STORAGE, ConfigurationError, MonitorSettings, get_logger, get_settings_manager, setup_logging
from discovery import ChangeKind, DeviceRecord, NetworkScanner
from discovery.classifier import address_sort_key

logger = get_logger(__name__)

CHANGE_MARKERS = {
    ChangeKind.CONNECTED: "+",
    ChangeKind.DISCONNECTED: "-",
    ChangeKind.UPDATED: "~",
}


def format_device(device: DeviceRecord) -> str:
    """One table row for a device."""
    latency = f"{device.latency_ms:.1f} ms" if device.latency_ms is not None else "-"
    return (
        f"{device.ip_address:<15}  {device.mac_address:<17}  {device.name:<24}  "
        f"{device.category.value:<9}  {device.connection.value:<8}  "
        f"{device.signal.value:<9}  {latency}"
    )


def format_change(device: DeviceRecord, kind: ChangeKind) -> str:
    return f"{CHANGE_MARKERS[kind]} {kind.value:<12} {device.name} ({device.device_info})"


def print_devices(devices: List[DeviceRecord]) -> None:
    if not devices:
        print("No devices found.")
        return
    for device in sorted(devices, key=lambda d: address_sort_key(d.ip_address)):
        print(format_device(device))
    print(f"\n{len(devices)} device(s)")


def cmd_info(scanner: NetworkScanner, args: argparse.Namespace) -> int:
    context = scanner.resolve_network_info()
    if not context.is_scannable:
        print("No active IPv4 interface.", file=sys.stderr)
        return 1
    print(f"Interface:    {context.interface}")
    print(f"Local IP:     {context.local_ip}")
    print(f"Subnet mask:  {context.subnet_mask}")
    print(f"Gateway:      {context.gateway or 'unknown'}")
    print(f"Scan range:   {context.prefix}.1 - {context.prefix}.254")
    return 0


def cmd_scan(scanner: NetworkScanner, args: argparse.Namespace) -> int:
    print_devices(scanner.scan())
    return 0


def cmd_watch(scanner: NetworkScanner, args: argparse.Namespace) -> int:
    if args.once:
        for change in scanner.run_monitor_cycle():
            print(format_change(change.device, change.kind))
        return 0

    stop_requested = threading.Event()

    def signal_handler(signum, frame):
        logger.info(f"Received signal {signum}, stopping...")
        stop_requested.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    def on_change(device: DeviceRecord, kind: ChangeKind) -> None:
        print(format_change(device, kind), flush=True)

    print(f"Watching every {scanner.settings.monitor_interval:g}s, Ctrl+C to stop.", flush=True)
    scanner.start_monitoring(on_change)
    try:
        # Short waits keep the main thread responsive to signals
        while not stop_requested.wait(0.5):
            pass
    finally:
        scanner.stop_monitoring()
    return 0



def cmd_config(args: argparse.Namespace) -> int:
    """Show the saved settings, or change and save the ones given."""
    manager = get_settings_manager(args.data_dir)
    changes = {
        field.name: getattr(args, field.name)
        for field in dataclasses.fields(MonitorSettings)
        if getattr(args, field.name, None) is not None
    }

    try:
        settings = manager.update(**changes) if changes else manager.settings
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    for name, value in settings.to_dict().items():
        print(f"{name:<22} {value}")
    if changes:
        print(f"\nSaved to {manager.settings_file}")
    return 0


COMMANDS = {
    "info": cmd_info,
    "scan": cmd_scan,
    "watch": cmd_watch,
}


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lan-monitor",
        description="Discover devices on the local /24 network and watch for changes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  lan-monitor info              Show interface, gateway and scan range
  lan-monitor scan              Scan once and list responding devices
  lan-monitor watch             Report devices as they connect and disconnect
  lan-monitor watch --once      Run a single change-detection cycle
  lan-monitor config --monitor-interval 60   Scan every minute from now on
        """,
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging on the console",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help=f"Settings and log directory (default: ~/{STORAGE.DATA_DIR_NAME})",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("info", help="Show local network information")
    subparsers.add_parser("scan", help="Scan the network once")

    watch = subparsers.add_parser("watch", help="Monitor the network for device changes")
    watch.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between scans (overrides settings)",
    )
    watch.add_argument(
        "--once",
        action="store_true",
        help="Run one cycle, print its changes and exit",
    )

    config = subparsers.add_parser("config", help="Show or change the saved settings")
    config.add_argument("--monitor-interval", type=float, help="Seconds between monitor scans")
    config.add_argument("--probe-timeout", type=float, help="Seconds to wait for each ICMP reply")
    config.add_argument("--dns-timeout", type=float, help="Seconds allowed for each reverse lookup")
    config.add_argument(
        "--max-probes",
        dest="max_concurrent_probes",
        type=int,
        help="Most reachability checks in flight at once",
    )
    return parser


def load_settings(args: argparse.Namespace) -> MonitorSettings:
    """Saved settings with command line overrides applied."""
    settings = get_settings_manager(args.data_dir).settings
    interval = getattr(args, "interval", None)
    if interval is not None:
        settings = dataclasses.replace(settings, monitor_interval=interval)
    settings.validate()
    return settings


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the lan-monitor command."""
    args = create_argument_parser().parse_args(argv)

    setup_logging(data_dir=args.data_dir, debug=args.debug, console_output=True)
    logger.info(f"lan-monitor {args.command} starting...")

    if args.command == "config":
        return cmd_config(args)

    try:
        scanner = NetworkScanner(load_settings(args))
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    return COMMANDS[args.command](scanner, args)


if __name__ == "__main__":
    sys.exit(main())
