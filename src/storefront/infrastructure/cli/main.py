import click

from storefront.domain.exceptions import ValidationError
from storefront.infrastructure.cli.cart_commands import (
    cart_add,
    cart_clear,
    cart_remove,
    cart_show,
    cart_update,
)
from storefront.infrastructure.cli.category_commands import category_create, category_tree
from storefront.infrastructure.cli.db_commands import db_init, db_ping
from storefront.infrastructure.cli.product_commands import (
    product_create,
    product_delete,
    product_list,
    product_low_stock,
    product_show,
    product_update,
)
from storefront.infrastructure.cli.stock_commands import (
    stock_release,
    stock_reserve,
    stock_set,
)
from storefront.infrastructure.cli.variant_commands import variant_create, variant_list
from storefront.infrastructure.config import Settings
from storefront.infrastructure.log_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storefront: multi-seller catalog, inventory and carts."""
    try:
        settings = Settings.from_env()
    except ValidationError as exc:
        raise click.ClickException(str(exc))
    configure_logging(settings.log_level)
    ctx.obj = settings


@cli.group()
def db() -> None:
    """Manage the database."""


@cli.group()
def category() -> None:
    """Manage categories."""


@cli.group()
def product() -> None:
    """Manage products."""


@cli.group()
def variant() -> None:
    """Manage product variants."""


@cli.group()
def stock() -> None:
    """Manage stock levels."""


@cli.group()
def cart() -> None:
    """Manage shopping carts."""


# Register subcommands
db.add_command(db_init)
db.add_command(db_ping)
category.add_command(category_create)
category.add_command(category_tree)
product.add_command(product_create)
product.add_command(product_delete)
product.add_command(product_list)
product.add_command(product_low_stock)
product.add_command(product_show)
product.add_command(product_update)
variant.add_command(variant_create)
variant.add_command(variant_list)
stock.add_command(stock_release)
stock.add_command(stock_reserve)
stock.add_command(stock_set)
cart.add_command(cart_add)
cart.add_command(cart_clear)
cart.add_command(cart_remove)
cart.add_command(cart_show)
cart.add_command(cart_update)
