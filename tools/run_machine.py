# tools/run_machine.py

import argparse
import json
from pathlib import Path

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn

from config.config_loader import DEFAULT_CONFIG, load_machine_config
from engine.errors import MachineError
from engine.step_engine import StepEngine
from logger.logger import JSONLogger

console = Console()


def simulate_machine(engine, max_steps=10_000, logger=None, log_frequency=100, machine=None):
    """Drive an engine until it halts, fails, or uses up `max_steps` macro-steps.

    Step errors are caught here and reported in the result, the way a driver
    treats a machine with a missing rule as halted-with-error.
    """
    error = None
    last_logged = engine.op_counter
    try:
        # a machine sitting on a halt state may still enter Halted past the budget
        while engine.op_counter - 1 < max_steps or engine.current_state in engine.halt_states:
            if not engine.advance():
                break
            if logger is not None and engine.op_counter - last_logged >= log_frequency:
                logger.log_step(engine, machine=machine)
                last_logged = engine.op_counter
    except MachineError as e:
        error = e

    result = {
        "machine": machine,
        "halted": engine.halted,
        "steps": engine.op_counter - 1,
        "error": None if error is None else f"{type(error).__name__}: {error}",
        "state": engine.current_state,
        "head": engine.tape.head,
        "tape": "".join(str(s) for s in engine.tape.snapshot()),
    }

    if logger is not None:
        logger.log_summary([result])
        if error is not None:
            logger.log_errors([result])
        elif engine.halted:
            logger.log_halting([result])

    return result


def run_machines(machine_files, output_directory=None, max_steps=None, strict=True,
                 log_frequency=None, log_file_prefix=None):
    output_directory = output_directory or DEFAULT_CONFIG["output_directory"]
    max_steps = max_steps or DEFAULT_CONFIG["max_steps"]
    log_frequency = log_frequency or DEFAULT_CONFIG["log_frequency"]
    log_file_prefix = log_file_prefix or DEFAULT_CONFIG["log_file_prefix"]

    logger = JSONLogger(output_directory, log_file_prefix)
    results_file = Path(output_directory) / "results.jsonl"

    results = []
    with Progress(
            SpinnerColumn(),
            BarColumn(),
            "[progress.percentage]{task.percentage:>3.0f}%",
            TextColumn("{task.completed}/{task.total} Machines"),
            TimeElapsedColumn(),
            console=console,
    ) as progress:
        task = progress.add_task("[cyan]Running...", total=len(machine_files))

        for machine_file in machine_files:
            name = Path(machine_file).stem
            # long batches can cross midnight
            logger.rotate()
            try:
                config = load_machine_config(machine_file)
                engine = StepEngine.from_config(config, strict=strict)
            except (MachineError, ValueError, TypeError, FileNotFoundError) as e:
                console.print(f"[yellow][WARNING] Failed to load {name}: {e}[/yellow]")
                result = {"machine": name, "halted": False, "steps": 0,
                          "error": f"{type(e).__name__}: {e}"}
                logger.log_errors([result])
            else:
                result = simulate_machine(engine, max_steps=max_steps, logger=logger,
                                          log_frequency=log_frequency, machine=name)
                if result["error"]:
                    console.print(f"[red]{name}: {result['error']}[/red]")

            results.append(result)
            progress.update(task, advance=1)

    with open(results_file, "a", encoding="utf-8") as f:
        for entry in results:
            f.write(json.dumps(entry) + "\n")

    halted = sum(1 for r in results if r["halted"])
    console.print(f"[green][SUCCESS] {halted}/{len(results)} machines halted. Results saved to {results_file}[/green]")
    return results


# === CLI ===
def main():
    parser = argparse.ArgumentParser(description="Run Turing machines to completion and log the results.")
    parser.add_argument("machines", nargs="+", help="Machine files (.json, .yaml)")
    parser.add_argument("--output", default=DEFAULT_CONFIG["output_directory"], help="Output directory for logs and results")
    parser.add_argument("--max_steps", type=int, default=DEFAULT_CONFIG["max_steps"], help="Maximum macro-steps per machine")
    parser.add_argument("--log_frequency", type=int, default=DEFAULT_CONFIG["log_frequency"], help="Macro-steps between trace records")
    parser.add_argument("--permissive", action="store_true", help="Skip rule validation")
    args = parser.parse_args()

    run_machines(
        args.machines,
        output_directory=args.output,
        max_steps=args.max_steps,
        strict=not args.permissive,
        log_frequency=args.log_frequency,
    )


if __name__ == "__main__":
    main()
