from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import uuid
from typing import Any, Dict, List

from dotenv import load_dotenv

from orchestra.config import build_orchestrator, load_app_config
from orchestra.core.orchestrator import AgentResponse, Orchestrator


# --------------------------------------------------------------------------------------
# Output helpers
# --------------------------------------------------------------------------------------


def parse_params(pairs: List[str]) -> Dict[str, Any]:
    """
    Turn repeated `--param key=value` arguments into a mapping.
    """
    params: Dict[str, Any] = {}
    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise SystemExit(f"Invalid --param {pair!r}, expected key=value.")
        params[key.strip()] = value.strip()
    return params


async def print_response(response: AgentResponse) -> None:
    """Print a response, writing streamed fragments as they arrive."""
    print(f"[{response.metadata.agent_name}]", end=" ")
    if not response.streaming:
        print(response.output.content)
        return
    async for fragment in response.output:
        print(fragment, end="", flush=True)
    print()


# --------------------------------------------------------------------------------------
# Interactive chat loop
# --------------------------------------------------------------------------------------


async def interactive_chat(
    orchestrator: Orchestrator,
    user_id: str,
    session_id: str,
    params: Dict[str, Any],
) -> None:
    """
    Simple terminal chat loop.

    Every message is routed by the orchestrator to the best matching
    agent. The session keeps running until:
      - user types /exit or /quit
      - or presses Ctrl+C.
    """
    print("\n[Interactive chat started]")
    print("Agents :", ", ".join(orchestrator.agents) or "(none)")
    print("Session:", session_id)
    print("Type /exit or press Ctrl+C to end the session.\n")

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "You> ")).strip()
        except (KeyboardInterrupt, EOFError):
            print("\n[Session interrupted by user, exiting chat]")
            break

        if not user_input:
            continue
        if user_input.lower() in {"/exit", "/quit"}:
            print("Bye")
            break

        try:
            response = await orchestrator.route_request(user_input, user_id, session_id, params)
            await print_response(response)
        except Exception as exc:  # noqa: BLE001
            # Keep the session alive.
            print(f"Error> {exc}")


# --------------------------------------------------------------------------------------
# CLI
# --------------------------------------------------------------------------------------


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Route requests to the best matching agent (single request or interactive chat)."
    )
    parser.add_argument(
        "--config",
        required=True,
        help="Path to config.yaml file.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    session_args = argparse.ArgumentParser(add_help=False)
    session_args.add_argument(
        "--user-id",
        default="local-user",
        help="User identifier passed to agents.",
    )
    session_args.add_argument(
        "--session-id",
        default=None,
        help="Session identifier (a random one is generated when omitted).",
    )
    session_args.add_argument(
        "--param",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Additional parameter for the agent; may be repeated.",
    )

    # route: single request
    route_parser = subparsers.add_parser(
        "route", parents=[session_args], help="Route a single request."
    )
    route_parser.add_argument(
        "text",
        help="Request text to route.",
    )

    # chat: interactive loop
    subparsers.add_parser(
        "chat", parents=[session_args], help="Interactive chat session."
    )

    # agents: list registry
    subparsers.add_parser("agents", help="List configured agents.")

    return parser.parse_args(argv)


# --------------------------------------------------------------------------------------
# main()
# --------------------------------------------------------------------------------------


async def run(args: argparse.Namespace, config: Dict[str, Any]) -> None:
    orchestrator = build_orchestrator(config)

    if args.command == "agents":
        for agent_id, info in orchestrator.get_all_agents().items():
            print(f"{agent_id:20} {info['name']}: {info['description']}")
        return

    session_id = args.session_id or uuid.uuid4().hex
    params = parse_params(args.param)

    if args.command == "chat":
        await interactive_chat(orchestrator, args.user_id, session_id, params)
        return

    if args.command == "route":
        response = await orchestrator.route_request(args.text, args.user_id, session_id, params)
        await print_response(response)
        return

    # Should never reach here
    raise SystemExit(f"Unknown command: {args.command!r}")


def main() -> None:
    # Load environment variables from .env (if present)
    load_dotenv()

    args = parse_args(sys.argv[1:])

    # Load config from YAML
    config = load_app_config(args.config)

    logging.basicConfig(
        level=(config.get("logging") or {}).get("level", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    asyncio.run(run(args, config))


if __name__ == "__main__":
    main()
