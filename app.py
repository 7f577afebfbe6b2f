# app.py

import argparse
import time
from pathlib import Path

from rich.console import Console
from rich.live import Live
from rich.markup import escape
from rich.prompt import Prompt, IntPrompt, Confirm
from rich.table import Table

from config.config_loader import (
    DEFAULT_CONFIG, list_examples, load_config, load_machine_config, save_config,
)
from engine.errors import MachineError
from engine.step_engine import StepEngine
from logger.logger import JSONLogger
from tools.machine_inspect import preview_machine
from tools.render import render_machine

console = Console()

CONFIG_PATH = "config/runtime_config.json"


# === Utilities ===
def load_runtime_config():
    if not Path(CONFIG_PATH).exists():
        console.print(f"[yellow]{CONFIG_PATH} not found, using defaults.[/yellow]")
        return DEFAULT_CONFIG.copy()
    return load_config(CONFIG_PATH)


class Session:
    """The machine currently loaded in the driver, plus its halted flag.

    `halted` is set when the engine refuses to advance or raises a step error.
    """

    def __init__(self, config):
        self.config = config
        self.engine = None
        self.name = None
        self.halted = False
        self.logger = JSONLogger(config["output_directory"], config["log_file_prefix"])

    def load(self, machine_file):
        machine = load_machine_config(machine_file)
        self.name = Path(machine_file).stem
        if self.config["strict"]:
            engine, error = preview_machine(machine)
        else:
            engine, error = StepEngine.from_config(machine, strict=False), None

        if error is not None:
            # the permissive build is only good for a preview graph
            self.engine = None
            self.halted = True
            console.print(f"[red]Failed:[/red] {error}")
            console.print(engine.describe())
            self.logger.log_errors([{"machine": self.name, "error": str(error)}])
            return False
        self.engine = engine
        self.halted = False
        console.print(f"[green]Machine is valid: loaded {self.name}[/green]")
        return True

    def advance(self):
        try:
            if not self.engine.advance():
                self.halted = True
        except MachineError as e:
            self.halted = True
            console.print(f"[red]Error:[/red] {e}")
            self.logger.log_errors([{"machine": self.name, "error": str(e), **self.engine.snapshot()}])
        return not self.halted

    def reset(self):
        self.engine.reset()
        self.halted = False


def show_main_menu(session):
    console.print("\n[bold cyan]Turing Machine Visualizer[/bold cyan]")
    if session.engine is not None:
        status = "[red]halted[/red]" if session.halted else "[green]ready[/green]"
        console.print(f"Machine: {session.name} ({status})")
    console.print("[1] Load Machine File")
    console.print("[2] Load Sample Machine")
    console.print("[3] Advance One Step")
    console.print("[4] Run")
    console.print("[5] Reset")
    console.print("[6] Show Graph")
    console.print("[7] Edit Config")
    console.print("[8] Exit")


def load_and_show(session, path):
    try:
        loaded = session.load(path)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return False
    if loaded:
        console.print(render_machine(session.engine))
    return loaded


def handle_load(session):
    path = Prompt.ask("Machine file (.json, .yaml)")
    load_and_show(session, path)


def handle_load_sample(session):
    samples = list_examples(session.config["examples_directory"])
    if not samples:
        console.print("[red]No sample machines found.[/red]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Index", justify="center")
    table.add_column("Sample", justify="center")
    for idx, sample in enumerate(samples):
        table.add_row(str(idx), sample.stem)
    console.print(table)

    idx_choice = IntPrompt.ask("\nChoose a sample by Index")
    if idx_choice < 0 or idx_choice >= len(samples):
        console.print("[red]Invalid choice.[/red]")
        return

    if session.engine is not None and not Confirm.ask("Replace the loaded machine?", default=True):
        return
    load_and_show(session, samples[idx_choice])


def handle_advance(session):
    if session.halted:
        console.print("[yellow]Machine has halted. Reset it first.[/yellow]")
        return
    session.advance()
    console.print(render_machine(session.engine))


def handle_run(session, speed_ms=None):
    if session.halted:
        console.print("[yellow]Machine has halted. Reset it first.[/yellow]")
        return
    speed_ms = speed_ms or IntPrompt.ask("Speed (ms per step)", default=session.config["speed_ms"])

    try:
        with Live(render_machine(session.engine), console=console, refresh_per_second=30) as live:
            while session.advance():
                live.update(render_machine(session.engine))
                time.sleep(speed_ms / 1000)
            live.update(render_machine(session.engine))
    except KeyboardInterrupt:
        console.print("[yellow]Paused.[/yellow]")
        return

    session.logger.log_step(session.engine, machine=session.name)
    console.print(f"[green]Stopped after {session.engine.op_counter - 1} steps.[/green]")


def handle_reset(session):
    session.reset()
    console.print(render_machine(session.engine))


def handle_show_graph(session):
    console.print(session.engine.describe())


def handle_edit_config(config):
    console.print("\n[bold]Edit Configuration[/bold]")

    strict = Confirm.ask("Validate machines strictly?", default=config.get("strict", True))
    speed_ms = IntPrompt.ask("Run speed (ms per step)", default=config.get("speed_ms", 250))
    max_steps = IntPrompt.ask("Max Steps for batch runs", default=config.get("max_steps", 10000))
    log_frequency = IntPrompt.ask("Steps between trace records", default=config.get("log_frequency", 100))

    config.update({
        "strict": strict,
        "speed_ms": speed_ms,
        "max_steps": max_steps,
        "log_frequency": log_frequency,
    })

    try:
        save_config(config, CONFIG_PATH)
        console.print("[green]Configuration updated successfully.[/green]")
    except (ValueError, TypeError) as e:
        console.print(f"[red]{e}[/red]")


def interactive_main():
    config = load_runtime_config()
    session = Session(config)

    while True:
        show_main_menu(session)
        choice = Prompt.ask("\nChoose an option", choices=["1", "2", "3", "4", "5", "6", "7", "8"], default="8")

        if choice in ("3", "4", "5", "6") and session.engine is None:
            console.print("[red]Load a valid machine first.[/red]")
            continue

        if choice == "1":
            handle_load(session)
        elif choice == "2":
            handle_load_sample(session)
        elif choice == "3":
            handle_advance(session)
        elif choice == "4":
            handle_run(session)
        elif choice == "5":
            handle_reset(session)
        elif choice == "6":
            handle_show_graph(session)
        elif choice == "7":
            handle_edit_config(config)
            session.config = load_runtime_config()
        elif choice == "8":
            console.print("[bold green]Goodbye![/bold green]")
            break


# === CLI Mode for Automation ===
def cli_main(args):
    config = load_runtime_config()
    session = Session(config)
    try:
        loaded = session.load(args.machine)
    except (FileNotFoundError, ValueError, TypeError) as e:
        console.print(f"[red]{e}[/red]")
        return 1
    if not loaded:
        return 1

    if args.run:
        handle_run(session, speed_ms=args.speed or config["speed_ms"])
    else:
        console.print(render_machine(session.engine))
        console.print(session.engine.describe())
    return 0


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Visualizer")
    parser.add_argument("--machine", help="Machine file to load (.json, .yaml)")
    parser.add_argument("--run", action="store_true", help="Run the machine until it halts")
    parser.add_argument("--speed", type=int, help="Run speed in ms per step")
    args = parser.parse_args()

    if args.machine:
        return cli_main(args)
    interactive_main()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
