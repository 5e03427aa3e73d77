"""Hi Tek CLI - dashboard operations against the spreadsheet proxy.

Commands:
- projects: List projects
- show: Show the dashboard for one project
- workflow: Print the 23-step workflow template
- create-project / edit-project / delete-project: Manage projects
- update-task: Set progress (and optionally the due date) of a task
- add-material / dispatch: Track material supply
- add-expense: Record an expense
- web serve: Run the web API
"""

from __future__ import annotations

import asyncio
from datetime import date, datetime

import typer
from rich.console import Console
from rich.table import Table

from hitek.config import AppConfig, get_config
from hitek.core.logging import configure_logging
from hitek.dashboard import DashboardController, ProjectSnapshot
from hitek.formatting import (
    format_date,
    format_days_left,
    format_days_spent,
    format_money,
    format_number,
)
from hitek.integration.sheet_client import SheetClient
from hitek.models import ErrorKind, Project
from hitek.repositories import Outcome
from hitek.workflow import WORKFLOW_TEMPLATE

app = typer.Typer(
    name="hitek",
    help="Hi Tek - construction project dashboard",
    no_args_is_help=True,
)
web_cli = typer.Typer(help="Web API")
app.add_typer(web_cli, name="web")

console = Console()

DATE_FORMATS = ["%Y-%m-%d"]

EXIT_CODES = {
    ErrorKind.VALIDATION: 2,
    ErrorKind.SEQUENCE: 2,
    ErrorKind.NOT_FOUND: 3,
}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    configure_logging(level="DEBUG" if verbose else None)


def _open_client(config: AppConfig) -> SheetClient:
    return SheetClient.from_config(config)


def _controller(client: SheetClient, config: AppConfig) -> DashboardController:
    return DashboardController(client, config)


def _check(outcome: Outcome):
    """Return the outcome's value or exit with the code for its error kind."""
    if outcome.ok:
        return outcome.value
    console.print(f"[bold red]✗[/bold red] {outcome.error}")
    raise typer.Exit(EXIT_CODES.get(outcome.kind, 1))


def _as_date(value: datetime | None) -> date | None:
    return value.date() if value else None


def _print_dashboard(snapshot: ProjectSnapshot, symbol: str) -> None:
    project = snapshot.project
    metrics = snapshot.metrics

    console.print(f"\n[bold]{project.name}[/bold] ({project.project_id})")
    console.print(f"  Client: {project.client_name or 'N/A'}  Location: {project.location or 'N/A'}")
    console.print(
        f"  Start: {format_date(project.start_date)}  Deadline: {format_date(project.deadline)}"
    )

    kpis = Table(title="KPIs", show_header=False)
    kpis.add_column("Metric", style="cyan")
    kpis.add_column("Value", justify="right")
    kpis.add_row("Days spent", format_days_spent(metrics.days_spent))
    days_left = format_days_left(metrics.days_left)
    kpis.add_row("Days left", f"[red]{days_left}[/red]" if metrics.days_left and metrics.days_left.overdue else days_left)
    kpis.add_row("Task progress", f"{metrics.task_progress}%")
    kpis.add_row("Tasks completed", f"{metrics.completed_tasks}/{metrics.total_tasks}")
    kpis.add_row("Material dispatch", f"{metrics.material_dispatch}%")
    kpis.add_row("Budget", format_money(metrics.budget.budget, symbol))
    kpis.add_row("Total expenses", format_money(metrics.total_expenses, symbol))
    remaining = format_money(metrics.budget_remaining, symbol)
    kpis.add_row("Budget remaining", f"[red]{remaining}[/red]" if metrics.budget.over_budget else remaining)
    console.print(kpis)

    tasks = Table(title="Workflow")
    tasks.add_column("Task ID", style="dim")
    tasks.add_column("Task")
    tasks.add_column("Responsible")
    tasks.add_column("Due")
    tasks.add_column("Progress", justify="right")
    tasks.add_column("Status")
    for option in snapshot.task_options:
        task = option.task
        name = f"[dim]{task.name} (locked)[/dim]" if option.locked else task.name
        tasks.add_row(
            task.task_id,
            name,
            task.responsible or "",
            format_date(task.due_date),
            f"{task.progress}%",
            task.status.value,
        )
    console.print(tasks)

    if metrics.materials:
        materials = Table(title="Materials")
        materials.add_column("Material")
        materials.add_column("Required", justify="right")
        materials.add_column("Dispatched", justify="right")
        materials.add_column("Balance", justify="right")
        materials.add_column("Progress", justify="right")
        for line in metrics.materials:
            materials.add_row(
                line.name,
                f"{format_number(line.required)} {line.unit}",
                f"{format_number(line.dispatched)} {line.unit}",
                f"{format_number(line.balance)} {line.unit}",
                f"{line.progress}%",
            )
        console.print(materials)

    if metrics.recent_expenses:
        expenses = Table(title="Recent expenses")
        expenses.add_column("Date")
        expenses.add_column("Description")
        expenses.add_column("Category")
        expenses.add_column("Amount", justify="right")
        for expense in metrics.recent_expenses:
            expenses.add_row(
                format_date(expense.expense_date),
                expense.description,
                expense.category or "",
                format_money(expense.amount, symbol),
            )
        console.print(expenses)

    for warning in snapshot.warnings:
        console.print(f"[yellow]⚠[/yellow] {warning}")


@app.command()
def projects():
    """List all projects."""
    config = get_config()

    async def _list():
        async with _open_client(config) as client:
            rows = _check(await _controller(client, config).projects.list())

        if not rows:
            console.print("[yellow]No projects found[/yellow]")
            return

        table = Table(title="Projects")
        table.add_column("Project ID", style="cyan")
        table.add_column("Name")
        table.add_column("Client")
        table.add_column("Location")
        table.add_column("Deadline")
        table.add_column("Budget", justify="right")
        for project in rows:
            table.add_row(
                project.project_id,
                project.name,
                project.client_name or "",
                project.location or "",
                format_date(project.deadline),
                format_money(project.budget, config.display.currency_symbol),
            )
        console.print(table)

    asyncio.run(_list())


@app.command()
def show(project_id: str = typer.Argument(..., help="Project ID")):
    """Show the dashboard for one project."""
    config = get_config()

    async def _show():
        async with _open_client(config) as client:
            snapshot = _check(await _controller(client, config).select_project(project_id))
        _print_dashboard(snapshot, config.display.currency_symbol)

    asyncio.run(_show())


@app.command()
def workflow():
    """Print the workflow every new project starts with."""
    table = Table(title="Hi Tek workflow")
    table.add_column("#", justify="right")
    table.add_column("Step")
    table.add_column("Responsible")
    for index, step in enumerate(WORKFLOW_TEMPLATE, start=1):
        table.add_row(str(index), step.name, step.responsible)
    console.print(table)


@app.command(name="create-project")
def create_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    name: str = typer.Option(..., "--name", help="Project name"),
    client_name: str | None = typer.Option(None, "--client", help="Client name"),
    location: str | None = typer.Option(None, "--location"),
    start_date: datetime | None = typer.Option(None, "--start", formats=DATE_FORMATS),
    deadline: datetime | None = typer.Option(None, "--deadline", formats=DATE_FORMATS),
    budget: float = typer.Option(0.0, "--budget", min=0),
    project_type: str | None = typer.Option(None, "--type"),
    contractor: str | None = typer.Option(None, "--contractor"),
    engineers: str | None = typer.Option(None, "--engineers"),
):
    """Create a project and seed its workflow tasks."""
    config = get_config()
    project = Project(
        project_id=project_id,
        name=name,
        client_name=client_name,
        location=location,
        start_date=_as_date(start_date),
        deadline=_as_date(deadline),
        budget=budget,
        project_type=project_type,
        contractor=contractor,
        engineers=engineers,
    )

    async def _create():
        async with _open_client(config) as client:
            creation = _check(await _controller(client, config).create_project_with_workflow(project))

        if creation.tasks.complete:
            console.print(f"[bold green]✓[/bold green] {creation.message}")
            console.print(f"  {creation.tasks.created} workflow tasks created")
        else:
            console.print(f"[yellow]⚠[/yellow] {creation.message}")
            for err in creation.tasks.errors:
                console.print(f"    {err}", style="dim")
            raise typer.Exit(1)

    asyncio.run(_create())


@app.command(name="edit-project")
def edit_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    name: str | None = typer.Option(None, "--name"),
    client_name: str | None = typer.Option(None, "--client"),
    location: str | None = typer.Option(None, "--location"),
    start_date: datetime | None = typer.Option(None, "--start", formats=DATE_FORMATS),
    deadline: datetime | None = typer.Option(None, "--deadline", formats=DATE_FORMATS),
    budget: float | None = typer.Option(None, "--budget", min=0),
    project_type: str | None = typer.Option(None, "--type"),
    contractor: str | None = typer.Option(None, "--contractor"),
    engineers: str | None = typer.Option(None, "--engineers"),
):
    """Change project details. Options left out keep their stored value."""
    config = get_config()
    changes = {
        "name": name,
        "client_name": client_name,
        "location": location,
        "start_date": _as_date(start_date),
        "deadline": _as_date(deadline),
        "budget": budget,
        "project_type": project_type,
        "contractor": contractor,
        "engineers": engineers,
    }
    changes = {key: value for key, value in changes.items() if value is not None}

    async def _edit():
        async with _open_client(config) as client:
            controller = _controller(client, config)
            existing = _check(await controller.projects.get(project_id))
            _check(await controller.update_project(existing.model_copy(update=changes)))
        console.print(f"[bold green]✓[/bold green] Project {project_id} updated")

    asyncio.run(_edit())


@app.command(name="delete-project")
def delete_project(
    project_id: str = typer.Argument(..., help="Project ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete a project with all of its tasks, materials and expenses."""
    if not yes:
        typer.confirm(
            f"Delete project {project_id} and all of its tasks, materials and expenses?",
            abort=True,
        )
    config = get_config()

    async def _delete():
        async with _open_client(config) as client:
            _check(await _controller(client, config).delete_project(project_id))
        console.print(f"[bold green]✓[/bold green] Project {project_id} deleted")

    asyncio.run(_delete())


@app.command(name="update-task")
def update_task(
    project_id: str = typer.Argument(..., help="Project ID"),
    task_id: str = typer.Argument(..., help="Task ID, e.g. P1-T3"),
    progress: int = typer.Argument(..., min=0, max=100, help="Progress 0-100"),
    due_date: datetime | None = typer.Option(None, "--due", formats=DATE_FORMATS),
):
    """Set a task's progress; its status follows automatically."""
    config = get_config()

    async def _update():
        async with _open_client(config) as client:
            controller = _controller(client, config)
            _check(await controller.select_project(project_id))
            task = _check(await controller.update_task(task_id, progress, _as_date(due_date)))
        console.print(
            f"[bold green]✓[/bold green] {task.name}: {task.progress}% ({task.status.value})"
        )

    asyncio.run(_update())


@app.command(name="add-material")
def add_material(
    project_id: str = typer.Argument(..., help="Project ID"),
    name: str = typer.Argument(..., help="Material name"),
    required: float = typer.Option(..., "--required", min=0),
    dispatched: float = typer.Option(0.0, "--dispatched", min=0),
    unit: str | None = typer.Option(None, "--unit"),
):
    """Start tracking a material for a project."""
    config = get_config()

    async def _add():
        async with _open_client(config) as client:
            controller = _controller(client, config)
            _check(await controller.select_project(project_id))
            material = _check(await controller.add_material(name, required, dispatched, unit))
        console.print(f"[bold green]✓[/bold green] Material '{material.name}' added")

    asyncio.run(_add())


@app.command()
def dispatch(
    project_id: str = typer.Argument(..., help="Project ID"),
    name: str = typer.Argument(..., help="Existing material name"),
    quantity: float = typer.Argument(..., help="Quantity dispatched now"),
):
    """Add a dispatch to an existing material's running total."""
    config = get_config()

    async def _dispatch():
        async with _open_client(config) as client:
            controller = _controller(client, config)
            _check(await controller.select_project(project_id))
            material = _check(await controller.record_dispatch(name, quantity))
        unit = material.unit or "Unit"
        console.print(
            f"[bold green]✓[/bold green] {material.name}: "
            f"{format_number(material.dispatched)}/{format_number(material.required)} {unit} dispatched"
        )

    asyncio.run(_dispatch())


@app.command(name="add-expense")
def add_expense(
    project_id: str = typer.Argument(..., help="Project ID"),
    amount: float = typer.Argument(..., help="Amount spent"),
    description: str = typer.Option(..., "--description", "-d"),
    expense_date: datetime | None = typer.Option(
        None, "--date", formats=DATE_FORMATS, help="Defaults to today"
    ),
    category: str | None = typer.Option(None, "--category"),
):
    """Record an expense against a project."""
    config = get_config()

    async def _add():
        async with _open_client(config) as client:
            controller = _controller(client, config)
            _check(await controller.select_project(project_id))
            when = _as_date(expense_date) or controller.today()
            expense = _check(await controller.record_expense(when, description, amount, category))
        console.print(
            f"[bold green]✓[/bold green] Expense of "
            f"{format_money(expense.amount, config.display.currency_symbol)} recorded"
        )

    asyncio.run(_add())


@web_cli.command("serve")
def web_serve(
    host: str = typer.Option("0.0.0.0", help="Host to bind"),
    port: int = typer.Option(8001, help="Port to bind"),
    reload: bool = typer.Option(False, help="Enable autoreload (dev only)"),
):
    """Run the FastAPI web API."""
    import uvicorn

    typer.echo(f"Starting Hi Tek web API on http://{host}:{port}")
    uvicorn.run("hitek.web.app:app", host=host, port=port, reload=reload, workers=1)


if __name__ == "__main__":
    app()
