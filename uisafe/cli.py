"""
@file cli.py
@brief Command-line interface for uisafe profiles.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from .config import available_presets
from .exceptions import ConfigError
from .interactionlogger import INTERACTION_LOGGER
from .profile import DEFAULT_SCHEMA_PATH, Profile


def _load_profile(path: str, schema: Optional[str]) -> Profile:
    return Profile.load(path, schema_path=schema or DEFAULT_SCHEMA_PATH)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    argv = argv if argv is not None else sys.argv[1:]
    INTERACTION_LOGGER.configure_from_env()

    p = argparse.ArgumentParser(
        prog="uisafe",
        description="uisafe - resilient UI interaction interceptors",
    )
    sub = p.add_subparsers(dest="cmd", required=True)

    valp = sub.add_parser("validate", help="Validate one or more interactor profiles")
    valp.add_argument("--profile", "-p", required=True, action="append", help="Path to profile YAML (can be used multiple times)")
    valp.add_argument("--schema", default=None, help="Path to profile JSON schema")

    showp = sub.add_parser("show", help="Show resolved timings and interactor chains of a profile")
    showp.add_argument("--profile", "-p", required=True, help="Path to profile YAML")
    showp.add_argument("--schema", default=None, help="Path to profile JSON schema")

    sub.add_parser("presets", help="Print timing presets as JSON")

    args = p.parse_args(argv)

    if args.cmd == "validate":
        invalid = 0
        for path in args.profile:
            try:
                profile = _load_profile(path, args.schema)
                print(f"+ Profile is valid: {path}")
                print(f"  - Tags: {', '.join(profile.tags()) or '(none)'}")
                print(f"  - Timing preset: {profile.time_config.preset}")
            except (ConfigError, OSError) as e:
                invalid += 1
                print(f"X Profile is invalid: {path}: {e}", file=sys.stderr)
        if len(args.profile) > 1:
            print("-" * 60)
            print(f"Total: {len(args.profile)}  Valid: {len(args.profile) - invalid}  Invalid: {invalid}")
        return 2 if invalid else 0

    if args.cmd == "show":
        try:
            profile = _load_profile(args.profile, args.schema)
        except (ConfigError, OSError) as e:
            print(f"Error loading profile: {e}", file=sys.stderr)
            return 1
        print(json.dumps(profile.describe(), indent=2, ensure_ascii=False))
        return 0

    if args.cmd == "presets":
        print(json.dumps(available_presets(), indent=2, ensure_ascii=False))
        return 0

    return 1


if __name__ == "__main__":
    sys.exit(main())
