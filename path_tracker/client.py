#!/usr/bin/env python3
"""
WebSocket Node for the Path Tracker

This module connects the path tracker to a JSON-over-WebSocket message bridge.
Odometry messages refresh the cached vehicle state, parameter messages retune
the controller, and every path message produces exactly one cmd_vel message.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from typing import Any, Dict, Optional, Union

import websockets

from path_tracker.config import (
    TERM_BLUE,
    TERM_ORANGE,
    TERM_RESET,
    WS_MAX_RETRY_DELAY_SECONDS,
    WS_RETRY_DELAY_SECONDS,
    WS_TIMEOUT_SECONDS,
    WS_URI,
)
from path_tracker.data_collector import DataCollector
from path_tracker.follower import yaw_from_quaternion
from path_tracker.messages import Odometry, ParameterBundle, Path, VelocityCommand
from path_tracker.parameters import ParameterGate
from path_tracker.tracker import PathTracker


class CustomFormatter(logging.Formatter):
    """Logging formatter that removes timestamps from INFO messages.

    INFO messages are printed bare for clean console output; WARNING, ERROR
    and DEBUG keep their timestamp and level.
    """

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


class PathTrackerNode:
    """Message routing between the WebSocket bridge and the path tracker.

    Attributes:
        uri: WebSocket URI to connect to.
        gate: Parameter gate fed by ``parameters`` messages.
        tracker: Control law that turns paths into velocity commands.
        data_collector: Optional CSV logger for odometry, paths and commands.
        should_stop: Flag indicating whether to stop the control loop.
    """

    def __init__(
        self,
        uri: str,
        tracker: Optional[PathTracker] = None,
        data_collector: Optional[DataCollector] = None,
    ) -> None:
        """Initialize the node.

        Args:
            uri: WebSocket URI to connect to (must start with ws:// or wss://).
            tracker: Path tracker to drive. A default one is built if None.
            data_collector: CSV logger. Nothing is recorded if None.

        Raises:
            ValueError: If URI format is invalid.
        """
        if not uri or not uri.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URI: {uri}. Must start with 'ws://' or 'wss://'")

        self.uri: str = uri
        self.should_stop: bool = False

        self.tracker = tracker if tracker is not None else PathTracker(gate=ParameterGate())
        self.gate = self.tracker.gate
        self.data_collector = data_collector

        self.commands_sent: int = 0

    async def send_velocity_command(self, websocket: Any, command: VelocityCommand) -> None:
        """Publish a velocity command on the bridge.

        Args:
            websocket: Active WebSocket connection.
            command: Command to send.
        """
        await websocket.send(json.dumps(command.to_dict()))
        self.commands_sent += 1
        logging.debug(f"Sent cmd_vel: linear={command.linear:.3f}, angular={command.angular:.3f}")

    def process_odometry_message(self, data: Dict[str, Any]) -> None:
        """Cache a new odometry snapshot."""
        odometry = Odometry.from_dict(data)
        self.tracker.on_odometry(odometry)

        if self.data_collector is not None:
            x, y, z = odometry.position
            self.data_collector.log_odometry(
                time.time(), x, y, z, yaw_from_quaternion(*odometry.orientation), odometry.speed
            )

    def process_parameters_message(self, data: Dict[str, Any]) -> None:
        """Push a new parameter bundle to the gate."""
        bundle = ParameterBundle.from_dict(data)
        if not self.gate.update(bundle):
            return
        logging.info(
            f"{TERM_BLUE}Parameters updated: speed={bundle.speed_target:.2f}m/s "
            f"Kp={bundle.kp} Ki={bundle.ki} Kd={bundle.kd}{TERM_RESET}"
        )

    def process_path_message(self, data: Dict[str, Any]) -> Optional[VelocityCommand]:
        """Run one control computation for a new path.

        Returns:
            The command to publish, or None if the path was rejected.
        """
        path = Path.from_dict(data)
        command = self.tracker.on_path(path)

        if self.data_collector is not None:
            now = time.time()
            self.data_collector.log_path(now, len(path), self.tracker.last_diagnostics)
            if command is not None:
                self.data_collector.log_command(
                    now,
                    command.linear,
                    command.angular,
                    self.tracker.last_diagnostics.get("yaw_error"),
                    self.tracker.active.speed_target,
                )

        return command

    def parse_and_route_message(self, message: Union[str, bytes]) -> Optional[VelocityCommand]:
        """Parse an incoming message and route it to the matching handler.

        Args:
            message: Raw JSON message string or bytes from WebSocket.

        Returns:
            A velocity command when the message was a path, otherwise None.
        """
        try:
            if isinstance(message, bytes):
                message = message.decode("utf-8")
            data = json.loads(message)

            message_type = data.get("message_type")

            if message_type == "odometry":
                self.process_odometry_message(data)
            elif message_type == "path":
                return self.process_path_message(data)
            elif message_type == "parameters":
                self.process_parameters_message(data)
            else:
                logging.debug(f"\nReceived unknown message: {json.dumps(data, indent=2)}\n")

        except json.JSONDecodeError as e:
            logging.error(f"Error parsing JSON: {e}")
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logging.error(f"Error processing message data: {e}")

        return None

    async def run_control_loop(self) -> None:
        """Connect to WebSocket and run the control loop.

        Maintains a connection to the bridge with automatic retry logic and
        exponential backoff until ``stop`` is called.
        """
        retry_delay = WS_RETRY_DELAY_SECONDS

        while not self.should_stop:
            try:
                async with websockets.connect(self.uri) as websocket:
                    logging.info(f"{TERM_BLUE}✓ Connected to {self.uri}{TERM_RESET}")
                    retry_delay = WS_RETRY_DELAY_SECONDS

                    while not self.should_stop:
                        try:
                            message = await asyncio.wait_for(
                                websocket.recv(), timeout=WS_TIMEOUT_SECONDS
                            )
                        except asyncio.TimeoutError:
                            continue

                        command = self.parse_and_route_message(message)
                        if command is not None:
                            if self.commands_sent == 0:
                                logging.info(f"{TERM_BLUE}✓ Tracking path{TERM_RESET}")
                            await self.send_velocity_command(websocket, command)

            except websockets.exceptions.ConnectionClosed:
                logging.warning(f"{TERM_ORANGE}Connection closed by server{TERM_RESET}")
            except (OSError, websockets.exceptions.WebSocketException) as e:
                logging.error(f"Connection error: {e}")

            if self.should_stop:
                break
            logging.info(f"Retrying in {retry_delay} seconds...")
            await asyncio.sleep(retry_delay)
            retry_delay = min(retry_delay * 2, WS_MAX_RETRY_DELAY_SECONDS)

    def stop(self) -> None:
        """Signal the node to stop."""
        self.should_stop = True

    def __enter__(self) -> "PathTrackerNode":
        if self.data_collector is not None:
            self.data_collector.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self.data_collector is not None:
            self.data_collector.cleanup()


async def main(uri: str = WS_URI, output_dir: Optional[str] = None) -> None:
    """Main entry point for the path tracker node.

    Creates a PathTrackerNode, sets up signal handlers for graceful shutdown,
    and starts the control loop.

    Args:
        uri: WebSocket URI of the message bridge.
        output_dir: Base directory for CSV recordings. Nothing is recorded if None.
    """
    data_collector = DataCollector(output_dir=output_dir) if output_dir is not None else None

    with PathTrackerNode(uri, data_collector=data_collector) as node:
        loop = asyncio.get_running_loop()

        def signal_handler() -> None:
            """Handle shutdown signals (SIGINT, SIGTERM)."""
            logging.info("\nShutdown signal received...")
            node.stop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

        await node.run_control_loop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Pure pursuit path tracker with PID speed control"
    )
    parser.add_argument("--uri", default=WS_URI, help=f"Message bridge URI (default: {WS_URI})")
    parser.add_argument(
        "--record",
        metavar="DIR",
        default=None,
        help="Record odometry, paths and commands as CSV under DIR/results/",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    return parser


def run(argv=None) -> None:
    """Parse arguments, configure logging and run the node until interrupted."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)

    try:
        asyncio.run(main(uri=args.uri, output_dir=args.record))
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    run()
