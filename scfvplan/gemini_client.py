"""Gemini CLI client for budget advisory prompts."""

import json
import subprocess
from typing import Any, Optional


# Standard wrapper for prompts that must answer in JSON
PROMPT_PREFIX = """You are assisting staff who prepare public budgets for a social assistance program (SCFV) in Paraná, Brazil.

CRITICAL INSTRUCTIONS:
1. Return ONLY valid JSON - no markdown code blocks, no explanations, no commentary
2. Your entire response must be parseable by a JSON parser
3. All numeric values must be numbers (not strings)
4. Free-text fields (reasons, warnings) must be written in Portuguese

TASK:
"""

PROMPT_SUFFIX = """

Remember: Return ONLY the JSON. No other text."""


def _run_gemini_cli(
    prompt: str,
    timeout: int = 120,
    cwd: Optional[str] = None,
) -> str:
    """
    Run Gemini CLI with a prompt and return raw output.

    Args:
        prompt: The prompt to send to Gemini.
        timeout: Timeout in seconds (default 120).
        cwd: Working directory for the subprocess (optional).

    Returns:
        The raw stdout from Gemini CLI.

    Raises:
        RuntimeError: If Gemini CLI is missing, fails or times out.
    """
    cmd = [
        'gemini',
        '--allowed-mcp-server-names', 'none',
        '-o', 'text',
        prompt
    ]

    try:
        result = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=True,
            timeout=timeout,
            cwd=cwd
        )
        return result.stdout.strip()

    except FileNotFoundError as e:
        raise RuntimeError("Gemini CLI not found on PATH (install the 'gemini' command)") from e
    except subprocess.TimeoutExpired:
        raise RuntimeError(f"Gemini CLI timed out after {timeout}s")
    except subprocess.CalledProcessError as e:
        raise RuntimeError(
            f"Gemini CLI failed with exit code {e.returncode}.\n"
            f"Stderr: {e.stderr}"
        ) from e


def extract_json(response_str: str) -> Any:
    """
    Parse a JSON object or array out of a model answer.

    Strips markdown code fences and any prose around the outermost
    brackets.

    Raises:
        RuntimeError: If no JSON can be parsed.
    """
    text = response_str

    # Handle markdown code blocks in response
    if '```json' in text:
        text = text.split('```json')[1].split('```')[0].strip()
    elif '```' in text:
        text = text.split('```')[1].split('```')[0].strip()

    # Try to find JSON object or array if not at start
    stripped = text.strip()
    if not stripped.startswith(('{', '[')):
        starts = [i for i in (stripped.find('{'), stripped.find('[')) if i >= 0]
        if starts:
            start = min(starts)
            closing = '}' if stripped[start] == '{' else ']'
            end = stripped.rfind(closing) + 1
            if end > start:
                stripped = stripped[start:end]

    try:
        return json.loads(stripped)
    except json.JSONDecodeError as e:
        raise RuntimeError(
            f"Failed to parse JSON from Gemini output: {e}\n"
            f"Raw output: {response_str[:500]}..."
        ) from e


def process_json_prompt(
    prompt: str,
    timeout: int = 120,
) -> Any:
    """
    Send a task prompt wrapped with JSON-only instructions and parse the answer.

    Args:
        prompt: Task description including the expected JSON shape.
        timeout: Timeout in seconds (default 120).

    Returns:
        The parsed JSON value (dict or list).

    Raises:
        RuntimeError: If Gemini CLI fails or the answer is not JSON.
    """
    wrapped_prompt = PROMPT_PREFIX + prompt + PROMPT_SUFFIX
    return extract_json(_run_gemini_cli(wrapped_prompt, timeout=timeout))
