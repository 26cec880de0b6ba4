"""
Flask CLI commands.

Commands:
- flask init-db: Create all tables
- flask create-employee: Provision an employee and its login
"""

import click
from retail_pos import database
from retail_pos.models import EmployeeRole
from retail_pos.exceptions import PosError
from retail_pos.services.employee_service import create_employee


def init_cli_commands(app):
    """Register CLI commands with Flask app."""

    @app.cli.command('init-db')
    def init_db_command():
        """Create database tables."""
        database.create_all()
        click.echo(click.style('Database tables created.', fg='green'))

    @app.cli.command('create-employee')
    @click.option('--name', prompt=True, help='Employee full name')
    @click.option('--email', prompt=True, help='Login email address')
    @click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Login password')
    @click.option('--role', type=click.Choice([r.value for r in EmployeeRole]), default=EmployeeRole.CASHIER.value,
                  show_default=True, help='Employee role')
    def create_employee_command(name, email, password, role):
        """Create an employee together with its login."""
        if len(password) < 8:
            raise click.ClickException('The password must have at least 8 characters.')

        session = database.get_session()
        try:
            employee = create_employee(session, name=name, email=email, password=password, role=role)
        except PosError as e:
            raise click.ClickException(e.message)

        click.echo(click.style('Employee created.', fg='green', bold=True))
        click.echo(f'   ID: {employee.id}')
        click.echo(f'   Email: {email}')
        click.echo(f'   Role: {role}')
