#!/usr/bin/env python3
"""
Replay Script: Run recorded perception samples through a proctoring session

Reads a JSON-lines file with one sample per tick, for example:

    {"face_count": 1, "is_looking_away": false, "object_labels": []}
    {"face_count": 1, "is_looking_away": true, "object_labels": ["cell phone"]}
    null

and prints the final report as JSON. A `null` line is a tick where the
perception subsystem produced nothing.

Usage:
    python scripts/replay_session.py samples.jsonl --candidate "Jane Doe"
"""
import argparse
import json
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from integrity_proctor.config import settings
from integrity_proctor.proctor.models import DetectionConfig, EventType
from integrity_proctor.proctor.replay import read_samples, replay_samples
from integrity_proctor.utils.logging_config import setup_logging


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Replay perception samples through a proctoring session")
    parser.add_argument("samples", help="JSON-lines file of samples ('-' for stdin)")
    parser.add_argument("--candidate", default="Candidate", help="Candidate name")
    parser.add_argument("--interval", type=float, default=settings.SAMPLE_INTERVAL_SECONDS,
                        help="Seconds between samples")
    parser.add_argument("--focus-threshold", type=float, default=settings.FOCUS_THRESHOLD_SECONDS)
    parser.add_argument("--face-absence-threshold", type=float,
                        default=settings.FACE_ABSENCE_THRESHOLD_SECONDS)
    parser.add_argument("--object-fallback", choices=["device_detected", "other"],
                        default=settings.OBJECT_FALLBACK_EVENT)
    parser.add_argument("--verbose", action="store_true", help="Log engine activity to stdout")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    if args.verbose:
        setup_logging(service_name="replay", level="DEBUG")

    config = DetectionConfig(
        focus_threshold=args.focus_threshold,
        face_absence_threshold=args.face_absence_threshold,
        object_fallback=EventType(args.object_fallback)
    )

    if args.samples == "-":
        report = replay_samples(read_samples(sys.stdin), args.candidate, args.interval, config)
    else:
        with open(args.samples, "r", encoding="utf-8") as f:
            report = replay_samples(read_samples(f), args.candidate, args.interval, config)

    print(json.dumps(report.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
