"""Product management commands."""

import os
from decimal import Decimal

import click
from shopledger.cli.error_handling import handle_domain_error, parse_option
from shopledger.domain.attachments import Attachment, parse_document_type, validate_attachments
from shopledger.domain.errors import DomainError
from shopledger.domain.product import ProductService
from shopledger.utils.amount_parser import parse_amount, parse_rate
from shopledger.utils.date_parser import parse_date


@click.group()
def product_group():
    """Manage inventory products."""
    pass


@product_group.command("create")
@click.argument("name")
@click.option("--cost", default="0", help="Unit cost (e.g., 450.00)")
@click.option("--price", default="0", help="Selling price (e.g., 899.00)")
@click.option("--tax-rate", default="0", help="Sales tax rate percentage")
@click.option("--sku", help="Unique SKU")
@click.option("--barcode", help="Unique barcode")
@click.option("--category", help="Product category (e.g., rings, watches)")
@click.option("--supplier-id", type=int, help="Supplier the stock was bought from")
@click.option("--trade-in", "is_trade_in", is_flag=True, help="Item came in as a part-exchange")
@click.option("--consignment-supplier-id", type=int, help="Hold the item on consignment for this supplier")
@click.option("--consignment-start", help="Consignment agreement start date")
@click.option("--consignment-end", help="Consignment agreement end date")
@click.pass_context
def create_product(
    ctx,
    name: str,
    cost: str,
    price: str,
    tax_rate: str,
    sku: str | None,
    barcode: str | None,
    category: str | None,
    supplier_id: int | None,
    is_trade_in: bool,
    consignment_supplier_id: int | None,
    consignment_start: str | None,
    consignment_end: str | None,
):
    """Create a product.

    Examples:
        shopledger product create "Gold band" --cost 120 --price 249 --sku GB-01
        shopledger product create "Rolex Datejust" --price 5200 --consignment-supplier-id 3
    """
    service = ProductService(ctx.obj["db"], ctx.obj["cache"])

    unit_cost: Decimal = parse_option(ctx, parse_amount, cost, "cost")
    unit_price: Decimal = parse_option(ctx, parse_amount, price, "price")
    rate: Decimal = parse_option(ctx, parse_rate, tax_rate, "tax rate")
    start = parse_option(ctx, parse_date, consignment_start, "start date") if consignment_start else None
    end = parse_option(ctx, parse_date, consignment_end, "end date") if consignment_end else None

    try:
        product_id = service.create_product(
            name=name,
            unit_cost=unit_cost,
            unit_price=unit_price,
            tax_rate=rate,
            sku=sku,
            barcode=barcode,
            category=category,
            supplier_id=supplier_id,
            is_trade_in=is_trade_in,
            is_consignment=consignment_supplier_id is not None,
            consignment_supplier_id=consignment_supplier_id,
            consignment_start_date=start,
            consignment_end_date=end,
        )
        click.echo(f"Created product '{name}' (ID: {product_id})")
    except DomainError as e:
        handle_domain_error(ctx, e)


@product_group.command("list")
@click.option("--consignment", "only_consignment", is_flag=True, help="Only consignment stock")
@click.pass_context
def list_products(ctx, only_consignment: bool):
    """List products."""
    service = ProductService(ctx.obj["db"], ctx.obj["cache"])
    products = service.list_products(is_consignment=True if only_consignment else None)
    if not products:
        click.echo("No products found.")
        return

    click.echo(f"\n{'ID':<6} {'Name':<30} {'SKU':<12} {'Cost':>12} {'Price':>12}  Kind")
    click.echo("-" * 90)
    for p in products:
        kind = "consignment" if p.is_consignment else "trade-in" if p.is_trade_in else "owned"
        click.echo(
            f"{p.id:<6} {p.name[:30]:<30} {(p.sku or ''):<12} "
            f"£{p.unit_cost:>11,.2f} £{p.unit_price:>11,.2f}  {kind}"
        )


@product_group.command("check-documents")
@click.argument("files", type=click.Path(exists=True, dir_okay=False), nargs=-1, required=True)
@click.option("--type", "document_type", default="other", help="Document type (e.g., certificate_card, appraisal, consignment_agreement)")
@click.pass_context
def check_documents(ctx, files: tuple[str, ...], document_type: str):
    """Check document files can be attached to a product."""
    try:
        kind = parse_document_type(document_type)
        validate_attachments(
            [Attachment(os.path.basename(f), os.path.getsize(f)) for f in files], "document"
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
        return
    click.echo(f"{len(files)} {kind.value} document(s) OK")


def register_commands(cli):
    """Register product commands with main CLI."""
    cli.add_command(product_group, name="product")
