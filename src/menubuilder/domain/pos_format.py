"""POS interchange format: record splitting, field decoding and encoding.

Each record is one line of 42 comma-separated fields. Brace-delimited fields
such as ``{1,$8.00,2,$9.50}`` carry commas of their own, so before the line is
read as CSV every comma inside braces is replaced by ``BRACE_COMMA``; the
commas are restored only inside brace fields once the line has been split.
"""

import csv
import io
from decimal import Decimal
from typing import NamedTuple, Optional

from menubuilder.domain.entities import ChoiceGroupEntry, Item, ItemPrice, PrinterEntry
from menubuilder.domain.errors import PosFormatError
from menubuilder.utils.money import format_money, parse_amount

FIELD_COUNT = 42
ADD_MARKER = "A"
HEADER_MARKER = "Add"
BRACE_COMMA = "␟"
TRUE_TOKENS = frozenset({"1", "Y", "YES", "TRUE", "yes", "y", "true"})


class RecordError(ValueError):
    """A single record could not be decoded; the record is skipped."""


class PosRecord(NamedTuple):
    """Fields of one record and the line it starts on."""

    line_number: int
    fields: list[str]


def mask_braced_commas(text: str) -> str:
    """Replace commas inside ``{...}`` with ``BRACE_COMMA``.

    Only a brace that opens a field starts a brace list; braces inside quoted
    text or later in a field are ordinary characters. The brace state resets
    at the end of each line so an unbalanced brace cannot swallow the stream.

    Raises:
        PosFormatError: If the input already contains ``BRACE_COMMA``
    """
    position = text.find(BRACE_COMMA)
    if position != -1:
        line_number = text.count("\n", 0, position) + 1
        raise PosFormatError(
            f"Line {line_number}: input contains the reserved character U+241F"
        )

    result = []
    in_braces = False
    in_quotes = False
    at_field_start = True
    for char in text:
        if in_braces:
            if char == ",":
                result.append(BRACE_COMMA)
                continue
            if char == "}":
                in_braces = False
            elif char == "\n":
                in_braces = False
                at_field_start = True
                result.append(char)
                continue
        elif char == '"':
            in_quotes = not in_quotes
        elif not in_quotes:
            if char == "{" and at_field_start:
                in_braces = True
            elif char in ",\n":
                at_field_start = True
                result.append(char)
                continue
            elif char in " \t":
                result.append(char)
                continue
        at_field_start = False
        result.append(char)
    return "".join(result)


def is_brace_field(value: str) -> bool:
    """Return True if the field is a brace-delimited list."""
    stripped = value.strip()
    return stripped.startswith("{") and stripped.endswith("}")


def restore_braced_commas(value: str) -> str:
    """Undo ``mask_braced_commas`` for a single split field."""
    if is_brace_field(value):
        return value.replace(BRACE_COMMA, ",")
    return value


def split_records(text: str) -> list[PosRecord]:
    """Split a POS stream into records of exactly ``FIELD_COUNT`` fields.

    Blank lines are ignored.

    Raises:
        PosFormatError: On a record with the wrong field count, a reserved
            character in the input, or malformed quoting
    """
    masked = mask_braced_commas(text)
    reader = csv.reader(io.StringIO(masked, newline=""), skipinitialspace=True, strict=True)

    records = []
    start_line = 1
    try:
        for row in reader:
            line_number = start_line
            start_line = reader.line_num + 1
            if not any(field.strip() for field in row):
                continue
            if len(row) != FIELD_COUNT:
                raise PosFormatError(
                    f"Line {line_number}: expected {FIELD_COUNT} fields, found {len(row)}"
                )
            records.append(PosRecord(line_number, [restore_braced_commas(f) for f in row]))
    except csv.Error as e:
        raise PosFormatError(f"Line {reader.line_num}: {e}") from None
    return records


def is_header_record(fields: list[str]) -> bool:
    """Return True for the column-title row written above exported records."""
    return fields[0].strip() == HEADER_MARKER


# Scalar decoding


def parse_bool(value: str) -> bool:
    """Decode a flag; anything other than a recognized true token is False."""
    return value.strip() in TRUE_TOKENS


def parse_int(value: str, label: str, default: int = 0) -> int:
    """Decode an integer field, using ``default`` when the field is empty."""
    value = value.strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise RecordError(f"Invalid {label} '{value}'") from None


def parse_optional_id(value: str, label: str) -> Optional[int]:
    """Decode an optional reference; empty and ``0`` both mean unset."""
    entity_id = parse_int(value, label)
    return entity_id if entity_id != 0 else None


def parse_optional_decimal(value: str, label: str) -> Optional[Decimal]:
    """Decode an optional amount such as ``$0.00 ``; empty means absent."""
    if not value.strip():
        return None
    try:
        return parse_amount(value)
    except ValueError:
        raise RecordError(f"Invalid {label} '{value.strip()}'") from None


def parse_decimal(value: str, label: str) -> Decimal:
    """Decode a required amount; empty means zero."""
    amount = parse_optional_decimal(value, label)
    return amount if amount is not None else Decimal("0")


def optional_text(value: str) -> Optional[str]:
    """Return None for blank text."""
    return value if value.strip() else None


# Brace-list decoding


def brace_tokens(value: str, label: str) -> list[str]:
    """Split a brace list into its tokens; ``""`` and ``{}`` are empty."""
    value = value.strip()
    if not value:
        return []
    if not is_brace_field(value):
        raise RecordError(f"Invalid {label} list '{value}'")
    inner = value[1:-1].strip()
    if not inner:
        return []
    return [token.strip() for token in inner.split(",")]


def _pairs(value: str, label: str) -> list[tuple[str, str]]:
    tokens = brace_tokens(value, label)
    if len(tokens) % 2:
        raise RecordError(f"Invalid {label} list '{value.strip()}': odd number of values")
    return list(zip(tokens[0::2], tokens[1::2]))


def decode_item_prices(value: str) -> tuple[Optional[Decimal], tuple[ItemPrice, ...]]:
    """Decode ``{1,$D,L2,$P2,...}`` into the default price and level prices.

    The first pair is the default price. Later pairs use the file's level
    numbering, which is one higher than the internal price level ID.
    """
    pairs = _pairs(value, "item price")
    if not pairs:
        return None, ()

    decoded = []
    for level, price in pairs:
        level_id = parse_int(level, "price level")
        amount = parse_optional_decimal(price, "price")
        if amount is None:
            raise RecordError(f"Missing price for level {level_id}")
        decoded.append((level_id, amount))

    default_price = decoded[0][1]
    prices = tuple(ItemPrice(price_level_id=level_id - 1, price=amount) for level_id, amount in decoded[1:])
    return default_price, prices


def decode_choice_groups(value: str) -> tuple[ChoiceGroupEntry, ...]:
    """Decode ``{id,seq,id,seq,...}``."""
    return tuple(
        ChoiceGroupEntry(
            group_id=parse_int(group_id, "choice group"),
            sequence=parse_int(sequence, "choice group sequence"),
        )
        for group_id, sequence in _pairs(value, "choice group")
    )


def decode_printer_logicals(value: str) -> tuple[PrinterEntry, ...]:
    """Decode ``{id,flag,id,flag,...}``.

    The list is normalized to exactly one primary printer: the first flagged
    entry, or the first entry when none is flagged.
    """
    entries = [
        (parse_int(printer_id, "printer logical"), parse_int(flag, "printer flag") != 0)
        for printer_id, flag in _pairs(value, "printer logical")
    ]
    if not entries:
        return ()
    primary_index = next((i for i, (_, primary) in enumerate(entries) if primary), 0)
    return tuple(
        PrinterEntry(printer_id=printer_id, primary=i == primary_index)
        for i, (printer_id, _) in enumerate(entries)
    )


def decode_id_list(value: str, label: str) -> tuple[int, ...]:
    """Decode ``{id,id,...}``."""
    return tuple(parse_int(token, label) for token in brace_tokens(value, label))


def decode_item(fields: list[str]) -> Item:
    """Decode the 42 fields of a record into an Item.

    Raises:
        RecordError: If a field cannot be decoded
    """
    marker = fields[0].strip()
    if marker != ADD_MARKER:
        raise RecordError(f"Unknown record marker '{marker}'")

    item_id = parse_int(fields[1], "item ID", default=-1)
    if item_id <= 0:
        raise RecordError(f"Invalid item ID '{fields[1].strip()}'")

    default_price, item_prices = decode_item_prices(fields[6])

    return Item(
        id=item_id,
        name=fields[2],
        button1=fields[3],
        button2=optional_text(fields[4]),
        printer_text=fields[5],
        default_price=default_price,
        item_prices=item_prices,
        product_class=parse_optional_id(fields[7], "product class"),
        revenue_category=parse_optional_id(fields[8], "revenue category"),
        tax_group=parse_optional_id(fields[9], "tax group"),
        security_level=parse_optional_id(fields[10], "security level"),
        report_category=parse_optional_id(fields[11], "report category"),
        use_weight=parse_bool(fields[12]),
        weight_amount=parse_decimal(fields[13], "weight tare amount"),
        sku=optional_text(fields[14]),
        bar_gun_code=optional_text(fields[15]),
        cost_amount=parse_optional_decimal(fields[16], "cost amount"),
        reserved1=parse_bool(fields[17]),
        ask_price=parse_bool(fields[18]),
        print_on_check=parse_bool(fields[19]),
        discountable=parse_bool(fields[20]),
        voidable=parse_bool(fields[21]),
        not_active=parse_bool(fields[22]),
        tax_included=parse_bool(fields[23]),
        item_group=parse_optional_id(fields[24], "item group"),
        customer_receipt=fields[25],
        allow_price_override=parse_bool(fields[26]),
        reserved2=parse_bool(fields[27]),
        choice_groups=decode_choice_groups(fields[28]),
        printer_logicals=decode_printer_logicals(fields[29]),
        covers=parse_int(fields[30], "covers"),
        store_id=parse_int(fields[31], "store ID"),
        kitchen_video=fields[32],
        kds_dept=parse_int(fields[33], "KDS department"),
        kds_category=fields[34],
        kds_cooktime=parse_int(fields[35], "KDS cook time"),
        store_price_level=decode_id_list(fields[36], "store price level"),
        image_id=parse_int(fields[37], "image ID"),
        stock_item=parse_bool(fields[38]),
        language_iso_code=fields[39].strip(),
    )


# Encoding


def quote(text: str) -> str:
    """Wrap text in double quotes, doubling embedded quotes."""
    return '"' + text.replace('"', '""') + '"'


def bare_text(text: str) -> str:
    """Write an unquoted text field, quoting it only when it would not read back.

    Text with separators, quotes, line breaks or leading blanks is quoted, as
    is text that opens with a brace without being a brace list.
    """
    if (
        any(char in text for char in ',"\r\n')
        or text[:1] in (" ", "\t")
        or (text.startswith("{") and not is_brace_field(text))
    ):
        return quote(text)
    return text


def flag(value: bool) -> str:
    return "1" if value else "0"


def optional_id(value: Optional[int]) -> str:
    return str(value) if value is not None else "0"


def brace_list(values: list[object]) -> str:
    return "{" + ",".join(str(value) for value in values) + "}"


def encode_item_prices(item: Item) -> str:
    """Encode the default price and level prices; ``""`` when the item has none.

    The list always opens with the default price, so an item with level
    prices but no default is written with ``$0.00`` and reads back with a
    default price of zero.
    """
    if item.default_price is None and not item.item_prices:
        return '""'
    default = item.default_price if item.default_price is not None else Decimal("0")
    values: list[object] = [1, f"${format_money(default)}"]
    for entry in item.item_prices:
        values.extend([entry.price_level_id + 1, f"${format_money(entry.price)}"])
    return brace_list(values)


def encode_choice_groups(entries: tuple[ChoiceGroupEntry, ...]) -> str:
    values: list[object] = []
    for entry in entries:
        values.extend([entry.group_id, entry.sequence])
    return brace_list(values)


def encode_printer_logicals(entries: tuple[PrinterEntry, ...]) -> str:
    values: list[object] = []
    for entry in entries:
        values.extend([entry.printer_id, flag(entry.primary)])
    return brace_list(values)


def encode_cost(cost: Optional[Decimal]) -> str:
    """Encode the cost column; the trailing space is part of the format."""
    return f"${format_money(cost if cost is not None else Decimal('0'))} "


def encode_item(item: Item) -> str:
    """Encode an Item as one record line (without line terminator)."""
    fields = [
        quote(ADD_MARKER),
        str(item.id),
        quote(item.name),
        quote(item.button1),
        quote(item.button2 or ""),
        quote(item.printer_text),
        encode_item_prices(item),
        optional_id(item.product_class),
        optional_id(item.revenue_category),
        optional_id(item.tax_group),
        optional_id(item.security_level),
        optional_id(item.report_category),
        flag(item.use_weight),
        str(item.weight_amount),
        bare_text(item.sku or ""),
        bare_text(item.bar_gun_code or ""),
        encode_cost(item.cost_amount),
        flag(item.reserved1),
        flag(item.ask_price),
        flag(item.print_on_check),
        flag(item.discountable),
        flag(item.voidable),
        flag(item.not_active),
        flag(item.tax_included),
        optional_id(item.item_group),
        quote(item.customer_receipt),
        flag(item.allow_price_override),
        flag(item.reserved2),
        encode_choice_groups(item.choice_groups),
        encode_printer_logicals(item.printer_logicals),
        str(item.covers),
        str(item.store_id),
        quote(item.kitchen_video),
        str(item.kds_dept),
        quote(item.kds_category),
        str(item.kds_cooktime),
        brace_list(list(item.store_price_level)),
        str(item.image_id),
        flag(item.stock_item),
        quote(item.language_iso_code),
        "0",
        '""',
    ]
    return ",".join(fields)
