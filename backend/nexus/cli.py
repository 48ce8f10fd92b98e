# Overview: Flask CLI command groups for bootstrap, inspection, and demo data.

# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init [--email owner@ivrelife.local]
#   Create tables if missing and an owner account.
# - python -m flask system seed-demo
#   Idempotent demo data: two retailers, their locations, one user per role, a customer, sample orders.
#
# Users:
# - python -m flask users create --email ops@ivrelife.local --role backoffice
#   Create a user (prompts for the password). retailer needs --retailer-id,
#   location_user needs --location-id.
# - python -m flask users list [--role retailer]
#
# Capabilities:
# - python -m flask perms list [--role retailer] [--category ORDERS]
# - python -m flask perms check ops@ivrelife.local can_see_reports

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Customer, Location, Order, Retailer, User
from .permissions import (
    CAPABILITY_DEFINITIONS,
    Role,
    get_capabilities_by_category,
    get_capability_definition,
)
from .services.access_service import actor_from_user, capabilities_for, role_landing_route
from .services.auth_service import PasswordValidationError, UserError, create_user
from .services import order_transform_service as transforms

DEFAULT_PASSWORD = "Password123!"
ROLE_CHOICES = [role.value for role in Role]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--email', default='owner@ivrelife.local', help='Owner account email')
@click.option('--password', default=DEFAULT_PASSWORD, help='Owner account password')
@with_appcontext
def init_system(email, password):
    """
    Create all tables and an owner account.

    SECURITY: Change the default password immediately in production!
    """
    click.echo("START Initializing Nexus...")
    db.create_all()
    click.echo("PASS Tables ready")

    existing = db.session.query(User).filter_by(email=email.lower()).first()
    if existing:
        click.echo(f"WARN  User '{email}' already exists, skipping...")
        return

    try:
        user = create_user(email=email, password=password, role=Role.OWNER.value, name="Owner")
    except (PasswordValidationError, UserError) as e:
        click.echo(f"FAIL Could not create owner: {e}")
        return

    click.echo(f"PASS Created owner: {user.email}")
    click.echo(f"     Landing route: {role_landing_route(user.role)}")


_DEMO_RETAILERS = [
    ("TechHub Electronics", "https://techhub.com", ["Downtown", "Mall Kiosk"]),
    ("GadgetZone", "https://gadgetzone.com", ["Main Street"]),
]


def _ensure_retailer(name: str, website: str) -> Retailer:
    retailer = db.session.query(Retailer).filter_by(name=name).first()
    if not retailer:
        retailer = Retailer(name=name, website=website)
        db.session.add(retailer)
        db.session.commit()
        click.echo(f"PASS Created retailer: {name}")
    return retailer


def _ensure_location(retailer: Retailer, name: str) -> Location:
    location = db.session.query(Location).filter_by(retailer_id=retailer.id, name=name).first()
    if not location:
        location = Location(retailer_id=retailer.id, name=name)
        db.session.add(location)
        db.session.commit()
        click.echo(f"PASS Created location: {retailer.name} / {name}")
    return location


def _ensure_user(email: str, role: Role, **scope) -> User:
    user = db.session.query(User).filter_by(email=email).first()
    if user:
        click.echo(f"WARN  User '{email}' already exists, skipping...")
        return user
    user = create_user(email=email, password=DEFAULT_PASSWORD, role=role.value, **scope)
    click.echo(f"PASS Created {role.value}: {email}")
    return user


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Create demo retailers, locations, one user per role, a customer and two sample orders."""
    db.create_all()

    locations = []
    for name, website, location_names in _DEMO_RETAILERS:
        retailer = _ensure_retailer(name, website)
        locations.extend(_ensure_location(retailer, loc) for loc in location_names)

    first_location = locations[0]
    try:
        _ensure_user("owner@ivrelife.local", Role.OWNER)
        _ensure_user("backoffice@ivrelife.local", Role.BACKOFFICE)
        retailer_user = _ensure_user(
            "retailer@techhub.local", Role.RETAILER, retailer_id=first_location.retailer_id
        )
        _ensure_user("downtown@techhub.local", Role.LOCATION_USER, location_id=first_location.id)
    except (PasswordValidationError, UserError) as e:
        click.echo(f"FAIL Could not create demo users: {e}")
        return

    customer = db.session.query(Customer).filter_by(retailer_id=first_location.retailer_id).first()
    if not customer:
        customer = Customer(
            retailer_id=first_location.retailer_id,
            primary_location_id=first_location.id,
            name="Jordan Demo",
            email="jordan@example.com",
            created_by=retailer_user.id,
        )
        db.session.add(customer)
        db.session.commit()
        click.echo(f"PASS Created customer: {customer.name}")

    if db.session.query(Order).count() == 0:
        samples = [
            {"status": "pending", "items": [{"product_variant_id": "var-relax-chair", "quantity": 1, "unit_price": "2499.00"}],
             "total_amount": "2499.00"},
            {"status": "processing", "items": [{"product_variant_id": "var-massage-pad", "quantity": 2, "unit_price": "149.50"}],
             "total_amount": "299.00", "requires_ltl": False},
        ]
        for sample in samples:
            sample.update(
                retailer_id=first_location.retailer_id, location_id=first_location.id, customer_id=customer.id
            )
            order = transforms.with_defaults(sample, retailer_user.id)
            db.session.add(Order.from_record(transforms.to_persisted(order, retailer_user.id)))
        db.session.commit()
        click.echo(f"PASS Created {len(samples)} sample orders")

    click.echo("\nDemo credentials (password for all: Password123!):")
    for user in db.session.query(User).order_by(User.role).all():
        click.echo(f"   {user.role:<14} -> {user.email}")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLE_CHOICES), prompt=True, help='Role')
@click.option('--name', default=None, help='Display name')
@click.option('--retailer-id', default=None, help='Retailer ID (retailer role)')
@click.option('--location-id', default=None, help='Location ID (location_user role)')
@with_appcontext
def create_user_cli(email, password, role, name, retailer_id, location_id):
    """
    Create a new user.

    Password must meet strength requirements: 8+ chars, uppercase,
    lowercase, digit and special character.
    """
    try:
        user = create_user(
            email=email,
            password=password,
            role=role,
            name=name,
            retailer_id=retailer_id,
            location_id=location_id,
        )
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {e}")
        click.echo("Requirements: 8+ chars, uppercase, lowercase, digit, special char")
        return
    except UserError as e:
        click.echo(f"FAIL Failed to create user: {e}")
        return

    click.echo(f"PASS Created user: {user.email} with role '{user.role}'")
    if user.retailer_id:
        click.echo(f"     Retailer: {user.retailer_id}")
    if user.location_id:
        click.echo(f"     Location: {user.location_id}")


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLE_CHOICES), help='Filter by role')
@with_appcontext
def list_users(role):
    """List users with role and scope."""
    query = db.session.query(User)
    if role:
        query = query.filter_by(role=role)
    users = query.order_by(User.email).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "=" * 110)
    click.echo(f"{'Email':<32} {'Role':<14} {'Active':<7} {'Retailer':<37} {'Location'}")
    click.echo("=" * 110)
    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(
            f"{user.email:<32} {user.role:<14} {active_str:<7} "
            f"{user.retailer_id or '-':<37} {user.location_id or '-'}"
        )
    click.echo("=" * 110 + "\n")


@click.group('perms')
def perms_group():
    """Capability inspection commands."""


@perms_group.command('list')
@click.option('--role', type=click.Choice(ROLE_CHOICES), help='Show the capability set of a role')
@click.option('--category', help='Filter by category')
@with_appcontext
def list_permissions_cli(role, category):
    """List capabilities, optionally for a role or a category."""
    if role:
        capabilities = capabilities_for(role)
        click.echo(f"\nCapabilities for role: {role.upper()}")
        click.echo("-" * 60)
        for code, allowed in capabilities.flags.items():
            click.echo(f"  {'YES' if allowed else 'no ':<4} {code}")
        click.echo(f"\n Granted: {len(capabilities.granted())} of {len(capabilities.flags)}\n")
        return

    definitions = get_capabilities_by_category(category.upper()) if category else CAPABILITY_DEFINITIONS
    current_category = None
    for code, name, _description, cat in definitions:
        if cat != current_category:
            click.echo(f"\nCATEGORY {cat}")
            click.echo("-" * 60)
            current_category = cat
        click.echo(f"  {code:<24} {name}")
    click.echo(f"\n Total: {len(definitions)} capabilities\n")


@perms_group.command('check')
@click.argument('email')
@click.argument('capability_code')
@with_appcontext
def check_permission_cli(email, capability_code):
    """Check if a user's role grants a capability."""
    definition = get_capability_definition(capability_code)
    if not definition:
        click.echo(f"FAIL Unknown capability '{capability_code}'")
        return

    user = db.session.query(User).filter_by(email=email.lower()).first()
    if not user:
        click.echo(f"FAIL User '{email}' not found")
        return

    capabilities = capabilities_for(actor_from_user(user).role)
    if capabilities.configuration_error:
        click.echo(f"FAIL {capabilities.configuration_error}")
        return

    if capabilities.allows(capability_code):
        click.echo(f"PASS User '{email}' HAS capability '{capability_code}'")
    else:
        click.echo(f"FAIL User '{email}' DOES NOT HAVE capability '{capability_code}'")
    click.echo(f"\nCapability: {definition['name']} [{definition['category']}]")
    click.echo(f"            {definition['description']}")
    click.echo(f"\nRole: {user.role}")
    click.echo(f"Total capabilities: {len(capabilities.granted())}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(perms_group)
