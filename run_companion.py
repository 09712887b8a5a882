# run_companion.py
"""
Console driver for the guardian companion.

Runs the real-time core (threaded timers, simulated hazards, mock
notifications) and reads one-letter commands from stdin.

Usage
-----
    python run_companion.py                       # settings from .env
    python run_companion.py --store demo.json --seed 7
    python run_companion.py --no-speech

Commands
--------
    s  trigger SOS          c  cancel SOS
    m  toggle monitoring    p  print state
    a  add a contact        n  set SOS countdown
    q  quit
"""

import argparse
import logging

from capabilities import ConsoleHaptics, SpeechBridge
from companion import GuardianCore, Settings
from profile_store import SOS_COUNTDOWN_CHOICES, InvalidPreferenceError, JsonFileStore, ProfileStore

logger = logging.getLogger(__name__)


def print_state(core):
    snap    = core.escalation_state()
    profile = core.profile()
    print(f"  escalation : {snap.state.value}"
          + (f" ({snap.remaining}s left)" if snap.remaining else ""))
    print(f"  monitoring : {'Active' if core.monitor_armed() else 'Inactive'}")
    print(f"  last alert : {core.last_alert() or '-'}")
    print(f"  contacts   : {len(profile.contacts)}")
    for name, cap in core.capabilities().items():
        state = 'enabled' if cap.supported else f'unavailable ({cap.reason})'
        print(f"  {name:<15}: {state}")


def add_contact(core):
    name  = input("  name: ").strip()
    phone = input("  phone: ").strip()
    rel   = input("  relationship: ").strip()
    if not name or not phone:
        print("  name and phone are required")
        return
    contact = core.add_contact(name, phone, rel)
    print(f"  added {contact.name} with priority {contact.priority}")


def set_countdown(core):
    raw = input(f"  countdown seconds {SOS_COUNTDOWN_CHOICES}: ").strip()
    try:
        prefs = core.update_preferences(sos_countdown_seconds=int(raw))
    except (ValueError, InvalidPreferenceError) as exc:
        print(f"  rejected: {exc}")
        return
    print(f"  SOS countdown is now {prefs.sos_countdown_seconds} seconds")


def main(args):
    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    speech = None if args.no_speech else SpeechBridge(whisper_model=settings.whisper_model)
    store  = ProfileStore(JsonFileStore(args.store or settings.store_path))
    seed   = args.seed if args.seed is not None else settings.random_seed

    core = GuardianCore(
        store,
        haptics=ConsoleHaptics(),
        speech=speech,
        on_status=lambda msg: print(f"\n>>> {msg}"),
        on_alert=lambda event: print(f"\n⚠  {event.type} [{event.severity.value}] - {event.action}"),
        notify_timeout=settings.notify_timeout,
        random_seed=seed,
    )

    print("Guardian companion running - commands: s c m p a n q")
    try:
        while True:
            try:
                cmd = input("> ").strip().lower()
            except EOFError:
                break
            if cmd == 's':
                print(f"  trigger: {core.trigger_escalation().value}")
            elif cmd == 'c':
                print(f"  cancel: {core.cancel().value}")
            elif cmd == 'm':
                if core.monitor_armed():
                    core.stop_monitor()
                    print("  Hazard detection disabled")
                else:
                    core.start_monitor()
                    print("  Hazard detection enabled - monitoring environmental sounds")
            elif cmd == 'p':
                print_state(core)
            elif cmd == 'a':
                add_contact(core)
            elif cmd == 'n':
                set_countdown(core)
            elif cmd == 'q':
                break
            elif cmd:
                print("  unknown command")
    except KeyboardInterrupt:
        pass
    finally:
        core.shutdown()
    print("\nDone.")


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Guardian companion console')
    parser.add_argument('--store', default=None,
                        help='Path to the JSON store (overrides GUARDIAN_STORE_PATH)')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed for the simulated hazard source')
    parser.add_argument('--no-speech', action='store_true',
                        help='Skip probing speech capabilities')
    main(parser.parse_args())
