# display.py
# All terminal output for the agent loop.
#
# This module owns presentation entirely. The loop never formats strings for
# the terminal. ConsoleHooks and run.py call named functions here. Swap this
# file to change the entire UI.
#
# Colour language:
#   cyan    : scaffolding / routing events
#   blue    : streamed model text
#   yellow  : recoverable feedback (parse errors, unknown tools)
#   green   : success / final answer
#   red     : failures, halts
#   magenta : ReACT internals (Action / Observation)

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from agent_loop.models import AgentAction, AgentStep

console = Console()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _label(tag: str, color: str) -> Text:
    t = Text()
    t.append(f" {tag} ", style=f"bold white on {color}")
    return t


def _mono(value: str, max_len: int = 120) -> str:
    value = value.replace("\n", " ")
    if len(value) > max_len:
        return escape(value[:max_len]) + "…"
    return escape(value)


# ---------------------------------------------------------------------------
# Run entry
# ---------------------------------------------------------------------------


def banner(model: str, tools: list[str], max_iterations: int) -> None:
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]Agent Loop[/bold cyan]\n"
            "[dim]Plan → Act → Observe, bounded by an iteration budget[/dim]\n\n"
            f"[dim]Model      :[/dim] [white]{model}[/white]\n"
            f"[dim]Tools      :[/dim] [white]{', '.join(tools)}[/white]\n"
            f"[dim]Iterations :[/dim] [white]{max_iterations}[/white]",
            border_style="cyan",
            padding=(1, 4),
        )
    )


def prompt_received(prompt: str) -> None:
    console.print()
    console.print(Rule("[cyan]NEW REQUEST[/cyan]", style="cyan"))
    console.print(
        Panel(
            Text(prompt, style="white"),
            title=_label("USER PROMPT", "cyan"),
            border_style="cyan",
            padding=(0, 2),
        )
    )


# ---------------------------------------------------------------------------
# ReACT loop
# ---------------------------------------------------------------------------


def stream_chunk(chunk: str) -> None:
    console.print(chunk, style="blue", end="", markup=False, highlight=False)


def react_action(action: AgentAction) -> None:
    console.print()
    console.print(
        f"  [magenta]Action[/magenta]   [bold white]{escape(action.tool) or '∅'}[/bold white]"
        f"  [dim]{_mono(action.tool_input, 100)}[/dim]"
    )


def tool_start(text: str) -> None:
    console.print(f"  [cyan]↳ Calling tool[/cyan] [dim]{_mono(text, 80)}[/dim]…")


def react_observation(observation: str) -> None:
    console.print(f"  [magenta]Observe[/magenta]  [white]{_mono(observation, 140)}[/white]")


def hook_failed(hook: str, event: str, exc: BaseException) -> None:
    console.print(
        f"  [yellow]⚠ Hook {hook}.{event} raised[/yellow] [dim]{type(exc).__name__}: {escape(str(exc))}[/dim]"
    )


# ---------------------------------------------------------------------------
# Run summary
# ---------------------------------------------------------------------------


def execution_summary(steps: list[AgentStep]) -> None:
    console.print()
    table = Table(
        box=box.SIMPLE_HEAVY,
        border_style="dim",
        show_header=True,
        header_style="bold dim",
        padding=(0, 1),
    )
    table.add_column("Step", justify="center", width=6)
    table.add_column("Tool", width=12)
    table.add_column("Input", style="dim white", width=32)
    table.add_column("Observation", style="dim white")

    for index, step in enumerate(steps, start=1):
        table.add_row(
            str(index),
            step.action.tool or "[yellow]—[/yellow]",
            _mono(step.action.tool_input, 30),
            _mono(step.observation, 60),
        )

    console.print(
        Panel(
            table,
            title="[dim]EXECUTION SUMMARY[/dim]",
            border_style="dim",
            padding=(0, 1),
        )
    )


def step_tree(steps: list[AgentStep]) -> None:
    graph = Tree(f"[bold green]Execution Graph ({len(steps)} step(s))[/bold green]")
    for index, step in enumerate(steps, start=1):
        if not step.action.tool:
            node = graph.add(f"[bold yellow]Step {index}: parse recovery[/bold yellow]")
        else:
            node = graph.add(f"[bold magenta]Step {index}: {escape(step.action.tool)}[/bold magenta]")
            node.add(f"[dim]Input:[/dim] {_mono(step.action.tool_input, 80)}")
        node.add(f"[green]Observation:[/green] {_mono(step.observation, 80)}")
    console.print()
    console.print(graph)


# ---------------------------------------------------------------------------
# Final result
# ---------------------------------------------------------------------------


def final_result(result: str) -> None:
    console.print()
    console.print(
        Panel(
            Text(result, style="white"),
            title=_label("RESULT", "green"),
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()


def halt(reason: str) -> None:
    console.print()
    console.print(
        Panel(
            Text(reason, style="bold white"),
            title=_label("HALT", "red"),
            border_style="red",
            padding=(0, 2),
        )
    )
    console.print()
