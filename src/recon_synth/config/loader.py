import json
from pathlib import Path
from typing import Any

from recon_synth.exceptions import RequestValidationError


def load_generation_profiles(config_path: str | None = None) -> dict[str, Any]:
    """
    Loads the static generation vocabularies (country profiles, name word pools,
    product catalog, generic descriptions, default own company).
    If no path is provided, looks for generation_profiles.json in the config directory.
    """
    if config_path is None:
        # Default to the file next to this script
        final_path = Path(__file__).parent / "generation_profiles.json"
    else:
        final_path = Path(config_path)

    with open(final_path, encoding="utf-8") as f:
        data = json.load(f)
        if not isinstance(data, dict):
            raise TypeError(f"Expected dict from {final_path}, got {type(data)}")
        return data


def load_generation_request(request_path: str) -> dict[str, Any]:
    """
    Loads a generation request document (the JSON request contract).

    A request file is client input, so an unreadable file, invalid JSON or a
    document that is not an object raises RequestValidationError.
    """
    final_path = Path(request_path)

    try:
        with open(final_path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise RequestValidationError(f"Cannot read request file {final_path}: {e}") from e
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise RequestValidationError(f"Request file {final_path} is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise RequestValidationError(
            f"Expected a JSON object in {final_path}, got {type(data).__name__}"
        )
    return data
