# tools/machine_inspect.py

import argparse
from pathlib import Path

from rich.console import Console
from rich.syntax import Syntax

from config.config_loader import load_machine_config
from engine.errors import ConstructionError
from engine.step_engine import StepEngine
from tools.render import render_rules

console = Console()


def preview_machine(config):
    """Build a machine in strict mode, falling back to a permissive build.

    Returns (engine, error): `error` is None when the strict build succeeded,
    otherwise it holds the validation error and `engine` is the best-effort
    permissive machine, still good enough to draw.
    """
    try:
        return StepEngine.from_config(config, strict=True), None
    except ConstructionError as e:
        return StepEngine.from_config(config, strict=False), e


def write_graph(graph, graph_directory, name):
    graph_directory = Path(graph_directory)
    graph_directory.mkdir(parents=True, exist_ok=True)
    graph_path = graph_directory / f"{name}.dot"
    with open(graph_path, "w", encoding="utf-8") as f:
        f.write(graph)
    return graph_path


def inspect_machine(machine_file, graph_directory=None):
    config = load_machine_config(machine_file)
    engine, error = preview_machine(config)

    name = Path(machine_file).stem
    console.print(f"\n[bold cyan]=== Machine {name} ===[/bold cyan]")
    if error is None:
        console.print("[green]Machine is valid[/green]")
    else:
        console.print(f"[red]Failed:[/red] {error}")

    console.print(f"  Start: {engine.start_state}")
    console.print(f"  Halt: {', '.join(engine.halt_states) or '-'}")
    console.print(f"  States: {', '.join(map(str, engine.states))}")
    console.print(f"  Symbols: {', '.join(map(str, engine.symbols))}")
    console.print(f"  Empty symbol: {engine.empty_symbol}")

    console.print("\n=== Rules ===")
    console.print(render_rules(engine))

    graph = engine.describe()
    console.print("\n=== Graph ===")
    console.print(Syntax(graph, "dot", theme="ansi_dark"))

    graph_path = None
    if graph_directory:
        graph_path = write_graph(graph, graph_directory, name)
        console.print(f"[green]Graph written to {graph_path}[/green]")

    return {
        "valid": error is None,
        "error": None if error is None else str(error),
        "graph": graph,
        "graph_path": None if graph_path is None else str(graph_path),
    }


def main():
    parser = argparse.ArgumentParser(description="Turing Machine Inspector")
    parser.add_argument("machine", help="Machine file (.json, .yaml)")
    parser.add_argument("--graph_dir", help="Directory to write the DOT graph to")
    args = parser.parse_args()

    result = inspect_machine(args.machine, graph_directory=args.graph_dir)
    return 0 if result["valid"] else 1


if __name__ == "__main__":
    raise SystemExit(main())
