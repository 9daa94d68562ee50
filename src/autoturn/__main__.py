"""Entry point for the turn automation demo."""

import asyncio
from pathlib import Path

from rich.console import Console
from rich.table import Table

from autoturn.automation import Automation, initialize_automation
from autoturn.config.settings import settings
from autoturn.core import AutoTurnError, Combat, RunSummary, validate_queue
from autoturn.models import Token
from autoturn.scenarios import create_sample_encounter, create_sample_queues
from autoturn.storage import Database
from autoturn.utils.logging import setup_logging

console = Console()

HELP = (
    "Commands: next | run [token] | status | stop | list [token] | check [token] | "
    "export <file> [token] | import <file> [append] | auto [token] | roll | reset | quit"
)


# ─────────────────────────────────────────────────────────────────────────────
# Output
# ─────────────────────────────────────────────────────────────────────────────
def show_tokens(combat: Combat) -> None:
    table = Table(title=f"Round {combat.round}")
    table.add_column("")
    table.add_column("Token")
    table.add_column("HP", justify="right")
    table.add_column("AC", justify="right")
    table.add_column("Position")
    table.add_column("Init", justify="right")
    table.add_column("Auto")
    for token in combat.combatants:
        marker = "▶" if token is combat.current else ""
        style = "dim" if not token.alive else None
        table.add_row(
            marker,
            token.name,
            f"{token.hp}/{token.max_hp}",
            str(token.ac),
            f"{token.position.x}, {token.position.y}",
            str(token.initiative) if token.initiative is not None else "-",
            "yes" if token.auto_initiative else "",
            style=style,
        )
    console.print(table)


def show_queue(automation: Automation, token: Token) -> None:
    actions = automation.queues.get_sorted_actions(token.id)
    enabled = automation.queues.is_queue_enabled(token.id)
    table = Table(title=f"{token.name} ({'enabled' if enabled else 'disabled'})")
    table.add_column("#", justify="right")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("Condition")
    table.add_column("Branches")
    for action in actions:
        condition = str(getattr(action.condition.type, "value", action.condition.type))
        if action.condition.value:
            condition += f" {action.condition.value}"
        branches = " ".join(
            f"{label}->{target}"
            for label, target in (("ok", action.on_success), ("fail", action.on_failure))
            if target
        )
        table.add_row(
            str(action.order),
            action.id,
            action.name,
            str(getattr(action.type, "value", action.type)),
            condition,
            branches,
            style=None if action.enabled else "dim",
        )
    console.print(table)


def show_summary(summary: RunSummary | None) -> None:
    if summary is None:
        console.print("[yellow]Nothing ran (queue empty, disabled, or another run in progress)[/yellow]")
        return
    for action_id, outcome in summary.results.items():
        colour = "green" if outcome.success else "red"
        detail = outcome.message or (outcome.error_kind.value if outcome.error_kind else "")
        console.print(f"  [{colour}]{action_id}[/{colour}] {detail}")
    state = "stopped" if summary.stopped else "done"
    console.print(f"[bold]{summary.executed} executed, {summary.skipped} skipped ({state})[/bold]")


# ─────────────────────────────────────────────────────────────────────────────
# Command Loop
# ─────────────────────────────────────────────────────────────────────────────
def get_command() -> str | None:
    """Get input from the user, handling EOF and interrupts."""
    try:
        text = input("\n> ").strip()
        return text if text else None
    except (EOFError, KeyboardInterrupt):
        return "quit"


def find_token(automation: Automation, combat: Combat, name: str | None) -> Token | None:
    if not name:
        return combat.current
    name = name.lower()
    for token in automation.scene.tokens():
        if token.id == name or token.name.lower().startswith(name):
            return token
    return None


async def command_loop(automation: Automation, combat: Combat) -> None:
    """Process commands until quit. Runs happen in the background so `stop` can interrupt them."""
    running: set[asyncio.Task] = set()

    def launch(coro) -> None:
        task = asyncio.create_task(coro)
        running.add(task)
        task.add_done_callback(running.discard)

    async def run_and_report(coro) -> None:
        try:
            show_summary(await coro)
        except AutoTurnError as e:
            console.print(f"[red]{e}[/red]")

    async def next_turn() -> None:
        await combat.next_turn()
        show_tokens(combat)

    async def on_turn(token: Token, is_new_turn: bool) -> None:
        await run_and_report(automation.trigger.on_turn(token, is_new_turn))

    combat.add_listener(on_turn)

    while True:
        text = await asyncio.to_thread(get_command)
        if text is None:
            console.print(HELP)
            continue

        command, *args = text.split()
        command = command.lower()

        if command in ("quit", "exit", "q"):
            automation.engine.stop_execution()
            console.print("Goodbye!")
            break

        try:
            if command == "next":
                launch(next_turn())

            elif command == "run":
                token = find_token(automation, combat, args[0] if args else None)
                if token is None:
                    console.print("[red]Unknown token[/red]")
                    continue
                actions = automation.queues.get_sorted_actions(token.id)
                launch(run_and_report(automation.engine.execute_queue(token, actions)))

            elif command == "auto":
                token = find_token(automation, combat, args[0] if args else None)
                if token is None:
                    console.print("[red]Unknown token[/red]")
                    continue
                enabled = combat.toggle_auto_initiative(token)
                console.print(f"Auto-initiative {'on' if enabled else 'off'} for {token.name}")

            elif command == "roll":
                rolled = await combat.roll_auto_initiative()
                if not rolled:
                    console.print("[yellow]No auto-initiative tokens waiting to roll[/yellow]")
                show_tokens(combat)

            elif command == "reset":
                cleared = combat.reset_auto_initiative()
                console.print(f"Reset initiative for {cleared} combatant(s)")

            elif command == "status":
                console.print(automation.engine.get_status())

            elif command == "stop":
                automation.engine.stop_execution()

            elif command in ("list", "check"):
                token = find_token(automation, combat, args[0] if args else None)
                if token is None:
                    show_tokens(combat)
                    continue
                if command == "list":
                    show_queue(automation, token)
                else:
                    report = validate_queue(automation.queues.get_queue(token.id))
                    if report.ok:
                        console.print(f"[green]{token.name}: queue looks fine[/green]")
                    for problem in report.problems():
                        console.print(f"[yellow]{problem}[/yellow]")

            elif command == "export" and args:
                token = find_token(automation, combat, args[1] if len(args) > 1 else None)
                if token is None:
                    console.print("[red]Unknown token[/red]")
                    continue
                Path(args[0]).write_text(automation.queues.export_queue(token.id, token.name))
                console.print(f"Exported {token.name}'s queue to {args[0]}")

            elif command == "import" and args:
                token = combat.current
                if token is None:
                    console.print("[red]Start combat first (next)[/red]")
                    continue
                append = len(args) > 1 and args[1].lower() == "append"
                imported = automation.queues.import_queue(token.id, Path(args[0]).read_text(), append=append)
                console.print(f"Imported {len(imported)} action(s) for {token.name}")

            else:
                console.print(HELP)

        except AutoTurnError as e:
            console.print(f"[red]{e}[/red]")
        except OSError as e:
            console.print(f"[red]File error: {e}[/red]")

    for task in list(running):
        task.cancel()


def main() -> None:
    """Main entry point."""
    # Setup logging
    logger = setup_logging(
        level=settings.effective_log_level,
        log_file=settings.log_file,
        enable_color=settings.enable_color,
    )

    logger.info("Starting turn automation demo")
    logger.debug(f"Configuration: {settings}")

    # Initialize sample encounter
    scene = create_sample_encounter(grid_distance=settings.grid_distance)
    automation = initialize_automation(scene, db=Database(":memory:"), settings=settings)
    for token_id, actions in create_sample_queues().items():
        automation.queues.set_queue(token_id, actions)

    combat = Combat(list(scene.tokens()), rules=automation.rules, roll_delay_ms=settings.roll_delay_ms)
    console.print("Welcome to Auto-Turn! Type 'next' to start combat.")
    console.print(HELP)
    asyncio.run(command_loop(automation, combat))


if __name__ == "__main__":
    main()
