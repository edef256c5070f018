"""Sink exerciser - pushes numbered records of mixed sizes through a configured file sink."""

import argparse
import logging
import random
import signal
import sys
import time
import uuid
from datetime import datetime

from rotating_sinks.config import build_sink, load_config
from rotating_sinks.errors import SinkError
from rotating_sinks.records import FormattedRecord
from rotating_sinks.sinks import BaseSink

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [rotating-sinks] %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# filler bytes per record; a mix makes size rotation land on uneven boundaries
PAYLOAD_SIZES = (16, 48, 160, 512)

_stop_requested = False


def _request_stop(sig, _frame):
    global _stop_requested
    logger.info("Signal %d received, finishing current record", sig)
    _stop_requested = True


def generate_entry(seq: int) -> str:
    size = random.choice(PAYLOAD_SIZES)
    filler = (uuid.uuid4().hex * (size // 32 + 1))[:size]
    stamp = datetime.now().isoformat(timespec="milliseconds")
    return f"{stamp} seq={seq:08d} payload={size} {filler}"


def pump(sink: BaseSink, count: int, interval: float) -> int:
    """Write records until *count* is reached (0 = unbounded) or a stop is requested."""
    seq = 0
    while not _stop_requested and (count == 0 or seq < count):
        if sink.write(FormattedRecord.from_text(generate_entry(seq))):
            logger.info("Record %d opened a new file: %s", seq, sink.filename)
        seq += 1
        if interval:
            time.sleep(interval)
    sink.flush()
    return seq


def build_cli_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Exercise a rotating file sink with generated records")
    parser.add_argument("--config", default=None, help="Path to YAML config file")
    parser.add_argument("--count", type=int, default=0,
                        help="Stop after this many records (default: run until interrupted)")
    parser.add_argument("--interval", type=float, default=0.05,
                        help="Seconds to sleep between records")
    return parser


def main(argv=None) -> int:
    signal.signal(signal.SIGINT, _request_stop)
    signal.signal(signal.SIGTERM, _request_stop)

    args = build_cli_parser().parse_args(argv)
    try:
        sink = build_sink(load_config(args.config))
    except SinkError as e:
        logger.error("Cannot start: %s", e)
        return 1

    with sink:
        try:
            written = pump(sink, args.count, args.interval)
        except SinkError as e:
            logger.error("Sink failed: %s", e)
            return 1

    logger.info("Done, %d records written", written)
    return 0


if __name__ == "__main__":
    sys.exit(main())
