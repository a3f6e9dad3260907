from rolefrost.identifiers import (
    fully_qualified_name,
    quote_identifier,
    split_identifier,
    unquote_identifier,
)


def test_split_identifier():
    assert split_identifier("SALES") == ["SALES"]
    assert split_identifier('SALES.REPORTING."DAILY.ORDERS"') == [
        "SALES",
        "REPORTING",
        '"DAILY.ORDERS"',
    ]


def test_quote_identifier():
    assert quote_identifier("Sales") == '"Sales"'
    assert quote_identifier('"Sales"') == '"Sales"'
    assert quote_identifier('SAY"HI') == '"SAY""HI"'


def test_unquote_identifier():
    assert unquote_identifier('"SAY""HI"') == 'SAY"HI'
    assert unquote_identifier("ANALYST") == "ANALYST"


def test_fully_qualified_name():
    assert fully_qualified_name("SALES", "REPORTING.ORDERS") == (
        '"SALES"."REPORTING"."ORDERS"'
    )
    assert fully_qualified_name("SALES", '"reporting"') == '"SALES"."reporting"'
