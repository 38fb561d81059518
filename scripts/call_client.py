#!/usr/bin/env python
"""Place one call to Tara from the terminal and send feedback afterwards."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import httpx

from tara_call.config import get_settings
from tara_call.session import (
    CallState,
    EventKind,
    LiveKitTransport,
    SessionController,
    format_elapsed,
)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--duration", type=float, default=30.0, help="Seconds to stay in the call")
    parser.add_argument("--score", type=int, default=5, help="Score from 1 to 5")
    parser.add_argument("--not-completed", action="store_true", help="Report the task as not completed")
    parser.add_argument("--feedback", default="", help="Free-text feedback")
    parser.add_argument("--skip-feedback", action="store_true")
    return parser.parse_args()


async def main() -> int:
    args = parse_args()
    settings = get_settings()

    async with httpx.AsyncClient(base_url=settings.api_base_url, timeout=10.0) as http:
        controller = SessionController(
            LiveKitTransport(),
            http,
            settings=settings,
            on_alert=lambda message: print(f"⚠️  {message}"),
        )
        back_to_idle = asyncio.Event()

        def on_state_changed(previous: CallState, current: CallState) -> None:
            print(f"   {previous.value} -> {current.value}")
            if current == CallState.IDLE:
                back_to_idle.set()

        handle = controller.subscribe(EventKind.STATE_CHANGED, on_state_changed)

        print(f"📞 Calling {settings.agent_display_name}...")
        if not await controller.connect():
            print(f"❌ {controller.session.error}")
            return 1

        print(f"✅ Joined {controller.session.room_name} as {controller.session.participant_name}")
        loop = asyncio.get_running_loop()
        deadline = loop.time() + args.duration
        while controller.state == CallState.IN_CALL and loop.time() < deadline:
            await asyncio.sleep(1)
            speaking = " (speaking)" if controller.session.agent_speaking else ""
            print(f"   {format_elapsed(controller.session.elapsed_seconds)}{speaking}")

        controller.disconnect()
        await controller.wait_closed()
        print("📴 Call ended")

        if args.skip_feedback:
            controller.skip_feedback()
        else:
            controller.wizard.answer_task_completed(not args.not_completed)
            controller.wizard.answer_human_score(args.score)
            controller.wizard.set_feedback_text(args.feedback)
            await controller.submit_feedback()
            if controller.session.confirmation:
                print(f"🙏 {controller.session.confirmation}")
            await back_to_idle.wait()

        controller.release(handle)
        await controller.close()
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
