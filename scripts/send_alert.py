#!/usr/bin/env python3
"""Run one emergency activation from the command line.

Resolves a fixed location, lists the nearest assistance points and
presses HELP (or speaks a phrase through the voice trigger) against the
configured alert endpoint.

Usage
-----
::

    export SHECURITY_ALERT_URL="http://localhost:5000/send-alert"
    python scripts/send_alert.py --lat 28.63 --lon 77.21 \
        --phone +911234567890 --email friend@example.com

Options::

    --lat / --lon        Location to report (required)
    --phone / --email    Emergency contact (falls back to the cached one)
    --say TEXT           Speak TEXT through the voice trigger instead of pressing HELP
    --reset              Forget the cached contact and exit
    --json               Output the outcome as JSON
    --verbose / -v       Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from shecurity import (  # noqa: E402
    DispatchOutcome,
    Notice,
    QueueSpeechRecognizer,
    ShecurityClient,
    ShecurityConfig,
    StaticLocationBackend,
)


def _print_notice(notice: Notice) -> None:
    print(f"[{notice.level.upper()}] {notice.text}", file=sys.stderr)


async def _wait_for_voice_outcome(client: ShecurityClient, timeout: float) -> DispatchOutcome | None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while loop.time() < deadline:
        outcome = client.session.last_outcome
        if outcome is not None:
            return outcome
        await asyncio.sleep(0.05)
    return None


async def main() -> int:
    parser = argparse.ArgumentParser(description="Send a SHEcurity emergency alert.")
    parser.add_argument("--lat", type=float, required=True, help="Latitude in degrees")
    parser.add_argument("--lon", type=float, required=True, help="Longitude in degrees")
    parser.add_argument("--phone", help="Emergency phone number")
    parser.add_argument("--email", help="Emergency email")
    parser.add_argument("--say", help="Utterance passed to the voice trigger")
    parser.add_argument("--reset", action="store_true", help="Forget the cached contact")
    parser.add_argument("--json", action="store_true", dest="json_mode", help="Output machine-readable JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    config = ShecurityConfig.from_env(voice_enabled=args.say is not None)
    recognizer = QueueSpeechRecognizer() if args.say is not None else None

    async with ShecurityClient(
        config,
        location_backend=StaticLocationBackend(args.lat, args.lon),
        recognizer=recognizer,
        notify=_print_notice,
    ) as client:
        session = client.session
        if args.reset:
            await client.reset()
            print("Cached contact cleared.")
            return 0

        if args.phone is not None or args.email is not None:
            session.set_contact(args.phone or session.contact.phone, args.email or session.contact.email)

        if not args.json_mode:
            print("Nearest assistance points:")
            for point in session.nearest:
                print(f"  {point.distance_km:7.2f} km  {point.name}")
                print(f"             {session.directions_url(point)}")

        if recognizer is not None:
            recognizer.feed(args.say)
            outcome = await _wait_for_voice_outcome(client, config.request_timeout + 1)
            if outcome is None:
                print("No voice keyword recognized; nothing sent.", file=sys.stderr)
                return 1
        else:
            outcome = await client.help()

        if args.json_mode:
            print(
                json.dumps(
                    {"outcome": outcome.to_wire(), "flags": session.flags.to_wire()},
                    indent=2,
                    ensure_ascii=False,
                )
            )
        return 0 if outcome.delivered else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
