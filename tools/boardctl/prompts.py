from __future__ import annotations

from typing import Any, Callable, Optional, Sequence, Tuple

import typer

from boardbuild.errors import CancellationSignal


def _abortable(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
	try:
		return fn(*args, **kwargs)
	except typer.Abort as e:
		raise CancellationSignal("Prompt aborted by user") from e


class TyperPrompter:
	"""Console prompts for GenerationSession. Ctrl-C / EOF become CancellationSignal."""

	def select(self, message: str, choices: Sequence[Tuple[str, Any]], default: Optional[Any] = None) -> Any:
		if not choices:
			raise ValueError(f"No choices available for: {message}")
		typer.echo(message)
		default_index = None
		for idx, (label, value) in enumerate(choices, start=1):
			marker = ""
			if default is not None and value == default:
				default_index = idx
				marker = " (default)"
			typer.echo(f"  {idx}) {label}{marker}")
		while True:
			picked = _abortable(typer.prompt, "Choice", default=default_index, type=int)
			if 1 <= picked <= len(choices):
				return choices[picked - 1][1]
			typer.secho(f"Please pick a number between 1 and {len(choices)}", fg=typer.colors.RED)

	def confirm(self, message: str, default: bool = True) -> bool:
		return _abortable(typer.confirm, message, default=default)

	def text(
		self,
		message: str,
		default: Optional[str] = None,
		validate: Optional[Callable[[str], Optional[str]]] = None,
	) -> str:
		while True:
			value = str(_abortable(typer.prompt, message, default=default)).strip()
			error = validate(value) if validate else None
			if error is None:
				return value
			typer.secho(error, fg=typer.colors.RED)
