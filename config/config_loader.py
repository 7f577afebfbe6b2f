import json
import os
from datetime import datetime
from pathlib import Path

import yaml
from rich.console import Console

console = Console()

DEFAULT_CONFIG = {
    "strict": True,
    "speed_ms": 250,
    "max_steps": 10_000,
    "log_frequency": 100,
    "output_directory": "logs/",
    "log_file_prefix": "turing_",
    "examples_directory": "examples/",
    "graph_directory": "graphs/",
}

# Expected types for validation
CONFIG_SCHEMA = {
    "strict": bool,
    "speed_ms": int,
    "max_steps": int,
    "log_frequency": int,
    "output_directory": str,
    "log_file_prefix": str,
    "examples_directory": str,
    "graph_directory": str,
}

MACHINE_REQUIRED = ("start", "empty_symbol", "rules")

MACHINE_SCHEMA = {
    "start": str,
    "empty_symbol": str,
    "rules": list,
    "halt": list,
    "tape": list,
    "head": int,
    "states": list,
    "symbols": list,
}

MACHINE_EXTENSIONS = (".json", ".yaml", ".yml")


# === Runtime configuration ===
def validate_config(config):
    for key, expected_type in CONFIG_SCHEMA.items():
        if key not in config:
            raise ValueError(f"Missing required configuration key: {key}")
        # bool is a subclass of int; reject True where a number is expected
        value = config[key]
        if not isinstance(value, expected_type) or (expected_type is int and isinstance(value, bool)):
            raise TypeError(f"Config key '{key}' expected {expected_type}, got {type(value)}.")

    if config["speed_ms"] <= 0:
        raise ValueError("speed_ms must be positive.")
    if config["max_steps"] <= 0 or config["log_frequency"] <= 0:
        raise ValueError("max_steps and log_frequency must be positive.")


def load_config(path="config/runtime_config.json", verbose=False):
    if not os.path.exists(path):
        raise FileNotFoundError(f"Configuration file not found at: {path}")

    with open(path, "r", encoding="utf-8") as f:
        user_config = json.load(f)

    # Merge defaults with overrides
    config = DEFAULT_CONFIG.copy()
    config.update(user_config)

    validate_config(config)

    os.makedirs(config["output_directory"], exist_ok=True)

    if verbose:
        console.print(f"[{datetime.now()}] Loaded config:")
        for key, value in config.items():
            console.print(f"  {key}: {value}")

    return config


def save_config(config, path="config/runtime_config.json"):
    validate_config(config)
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)


# === Machine configuration ===
def _split_commas(text):
    return [part.strip() for part in text.split(",") if part.strip()]


def normalize_machine_config(raw):
    """Check a raw machine mapping and coerce its shorthand forms.

    A string tape becomes a list of single characters, a comma separated halt
    string becomes a list and "q0,1,1,R,q0" rule strings become 5-element lists.
    """
    if not isinstance(raw, dict):
        raise TypeError(f"Machine configuration must be a mapping, got {type(raw)}.")

    config = dict(raw)
    for key in MACHINE_REQUIRED:
        if key not in config:
            raise ValueError(f'"{key}" key missing in machine configuration')

    # YAML reads a bare 0 or 1 as an int
    for key in ("start", "empty_symbol"):
        if isinstance(config[key], (int, float)) and not isinstance(config[key], bool):
            config[key] = str(config[key])

    if isinstance(config.get("tape"), str):
        config["tape"] = list(config["tape"])
    elif isinstance(config.get("tape"), list):
        config["tape"] = [str(cell) for cell in config["tape"]]
    for key in ("halt", "states", "symbols"):
        if isinstance(config.get(key), str):
            config[key] = _split_commas(config[key])
        elif isinstance(config.get(key), list):
            config[key] = [str(token) for token in config[key]]

    rules = []
    for rule in config["rules"] if isinstance(config["rules"], list) else []:
        if isinstance(rule, str):
            rules.append([field.strip() for field in rule.split(",")])
        elif isinstance(rule, (list, tuple)):
            rules.append([str(field) if field is not None else "" for field in rule])
        else:
            raise TypeError(f"Rule {rule!r} must be a list or a comma separated string.")
    if isinstance(config["rules"], list):
        config["rules"] = rules

    for key, expected_type in MACHINE_SCHEMA.items():
        if key in config and config[key] is not None and not isinstance(config[key], expected_type):
            raise TypeError(f"Machine key '{key}' expected {expected_type}, got {type(config[key])}.")

    return config


def load_machine_config(path):
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Machine file not found at: {path}")
    if path.suffix.lower() not in MACHINE_EXTENSIONS:
        raise ValueError(f"Unsupported machine file '{path.name}'. Use one of: {', '.join(MACHINE_EXTENSIONS)}")

    with open(path, "r", encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            raw = json.load(f)
        else:
            try:
                raw = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path.name}: {e}") from e

    return normalize_machine_config(raw)


def machine_config_from_text(start, empty_symbol, halt="", tape="", rules=""):
    """Build a machine configuration from free-text form fields.

    One rule per line, fields separated by commas, blank lines skipped. Optional
    fields left empty are omitted from the result.
    """
    config = {
        "rules": [[field.strip() for field in line.split(",")]
                  for line in rules.split("\n") if line.strip() != ""],
        "start": start,
        "empty_symbol": empty_symbol,
    }
    if halt:
        config["halt"] = _split_commas(halt)
    if tape:
        config["tape"] = tape
    return normalize_machine_config(config)


def save_machine_config(config, path):
    path = str(path)
    if not path.endswith(".json"):
        path = path + ".json"
    Path(path).parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4)
    return path


def list_examples(directory="examples/"):
    directory = Path(directory)
    if not directory.exists():
        return []
    return sorted(p for p in directory.iterdir() if p.suffix.lower() in MACHINE_EXTENSIONS)
