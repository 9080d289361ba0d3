# vmpc/coordinator.py
"""
Run a simulated MPC session described by a JSON file.

  python -m vmpc.coordinator session.json [--parties N] [--seed HEX] [--async]

session.json:
  {
    "parties": 3,
    "seed": "0x01020304",
    "inputs": [{"party": 0, "id": "a", "value": 10}, ...],
    "instructions": [{"op": "input", "id": "a", "party": 0}, ...]
  }

Command line flags override the file, the file overrides MPC_* environment
variables (see mpc_core/config.py).
Exit codes: 0 ok, 1 the protocol aborted, 2 bad session file or arguments.
"""
import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from .mpc_core import MPCConfig, MPCError, Orchestrator, SessionSpec, configure_logging

log = logging.getLogger(__name__)


def build_config(spec: SessionSpec, parties=None, seed=None, log_level=None, environ=None) -> MPCConfig:
    return MPCConfig.from_env(
        environ,
        parties=parties if parties is not None else spec.parties,
        seed=seed if seed is not None else spec.seed,
        log_level=log_level,
    )


def run_session(spec: SessionSpec, config: MPCConfig, use_async: bool = False):
    """Build the parties, feed inputs, run the circuit; returns (orchestrator, outputs)."""
    orch = Orchestrator(config, spec.inputs)
    if use_async:
        results = asyncio.run(orch.run_async(spec.circuit))
    else:
        results = orch.run(spec.circuit)
    return orch, results


def format_results(results) -> str:
    lines = []
    for party, outputs in sorted(results.items()):
        if not outputs:
            lines.append(f"party {party}: (no outputs)")
            continue
        shown = ", ".join(f"{k}={v}" for k, v in outputs.items())
        lines.append(f"party {party}: {shown}")
    return "\n".join(lines)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run a simulated MPC session.")
    parser.add_argument("session", help="path to the session JSON file")
    parser.add_argument("--parties", type=int, default=None)
    parser.add_argument("--seed", default=None, help="session seed as hex")
    parser.add_argument("--async", dest="use_async", action="store_true",
                        help="one asyncio task per party instead of a sequential loop")
    parser.add_argument("--log-level", default=None)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    try:
        spec = SessionSpec.from_file(args.session)
        config = build_config(spec, args.parties, args.seed, args.log_level)
    except (OSError, ValidationError, ValueError) as e:
        print(f"❌ bad session: {e}", file=sys.stderr)
        return 2

    configure_logging(config.log_level)
    print(f"🧩 parties={config.parties}  p=2^{config.field.power}-1  instructions={len(spec.instructions)}")

    try:
        _, results = run_session(spec, config, args.use_async)
    except MPCError as e:
        print(f"❌ protocol aborted: {type(e).__name__}: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"❌ bad session: {e}", file=sys.stderr)
        return 2

    print(format_results(results))
    return 0


if __name__ == "__main__":
    sys.exit(main())
