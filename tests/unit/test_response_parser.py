import json

import pytest
from langchain_core.messages import AIMessage, HumanMessage, ToolMessage

from agent_relay.agents.hedera import response_parser as parser


# ---------- message selection ----------

def test_only_current_turn_is_considered(state):
    response = state("Your balance is 10 HBAR", history=2)

    assert len(parser.current_turn_messages(response)) == 1
    # Earlier turns carried transaction bytes; they must not leak into this one.
    assert parser.extract_transaction_bytes(response) is None


def test_non_dict_response_yields_nothing():
    assert parser.current_turn_messages(None) == []
    assert parser.extract_output_text("oops") == ""


def test_output_text_joins_content_blocks():
    response = {
        "messages": [
            HumanMessage(content="hi"),
            AIMessage(content=[{"type": "text", "text": "Hello "}, {"type": "text", "text": "there"}]),
        ]
    }
    assert parser.extract_output_text(response) == "Hello there"


def test_output_text_skips_trailing_empty_ai_message():
    response = {
        "messages": [
            HumanMessage(content="hi"),
            AIMessage(content="Real answer"),
            AIMessage(content=""),
        ]
    }
    assert parser.extract_output_text(response) == "Real answer"


def test_tool_payloads_ignore_non_json_content():
    response = {
        "messages": [
            HumanMessage(content="q"),
            ToolMessage(content="plain text result", tool_call_id="1"),
            ToolMessage(content=json.dumps({"raw": {"bytes": [5]}}), tool_call_id="2"),
        ]
    }
    payloads = parser.tool_payloads(response)
    assert payloads == [{"raw": {"bytes": [5]}}, {"bytes": [5]}]


# ---------- transaction bytes ----------

@pytest.mark.parametrize(
    "value, expected",
    [
        (b"\x01\x02", b"\x01\x02"),
        ([1, 2, 3], b"\x01\x02\x03"),
        ({"type": "Buffer", "data": [10, 11]}, b"\x0a\x0b"),
        ("0x0a0b", b"\x0a\x0b"),
        ("AQID", b"\x01\x02\x03"),
    ],
)
def test_coerce_transaction_bytes_encodings(value, expected):
    assert parser.coerce_transaction_bytes(value) == expected


@pytest.mark.parametrize("value", [[], [256], "not bytes!", None, 42, {"data": "x"}])
def test_coerce_transaction_bytes_rejects_garbage(value):
    assert parser.coerce_transaction_bytes(value) is None


def test_transaction_bytes_from_nested_raw(state):
    response = state("Prepared", {"status": "ok", "raw": {"bytes": {"type": "Buffer", "data": [7, 8]}}})
    assert parser.extract_transaction_bytes(response) == b"\x07\x08"


def test_last_transaction_wins(state):
    response = state("Prepared", {"bytes": [1]}, {"transactionBytes": [2]})
    assert parser.extract_transaction_bytes(response) == b"\x02"


def test_preferred_transaction_orders_association_first(state):
    response = state(
        "Prepared",
        {
            "preparedTransactions": [
                {"step": "approval", "bytes": [2]},
                {"operation": "deposit", "bytes": [3]},
                {"type": "token_association", "bytes": [1]},
            ]
        },
    )
    assert [kind for kind, _ in parser.extract_prepared_transactions(response)] == [
        "approval",
        "other",
        "association",
    ]
    assert parser.extract_preferred_transaction(response) == b"\x01"


def test_preferred_transaction_needs_several_candidates(state):
    response = state("Prepared", {"bytes": [1], "step": "approval"})
    assert parser.extract_preferred_transaction(response) is None
    assert parser.extract_transaction_bytes(response) == b"\x01"


# ---------- flow artifacts ----------

def test_extract_next_step(state):
    response = state(
        "Approve first",
        {
            "bytes": [1],
            "nextStep": {
                "tool": "bonzo_deposit_tool",
                "step": "deposit",
                "originalParams": {"token": "hbar", "amount": 5},
            },
        },
    )
    step = parser.extract_next_step(response)
    assert step.tool == "bonzo_deposit_tool"
    assert step.step == "deposit"
    assert step.original_params == {"token": "hbar", "amount": 5}


def test_malformed_next_step_is_ignored(state):
    response = state("x", {"next_step": {"tool": "only-tool"}})
    assert parser.extract_next_step(response) is None


def test_next_step_with_null_params_is_kept(state):
    response = state(
        "Approve first",
        {"bytes": [1, 2], "nextStep": {"tool": "bonzo_deposit_tool", "step": "approval", "originalParams": None}},
    )
    step = parser.extract_next_step(response)
    assert step is not None
    assert step.step == "approval"
    assert step.original_params == {}


def test_malformed_next_step_does_not_mask_earlier_one(state):
    response = state(
        "x",
        {"bytes": [1], "nextStep": {"tool": "bonzo_deposit_tool", "step": "deposit"}},
        {"nextStep": {"tool": "broken"}},
    )
    step = parser.extract_next_step(response)
    assert (step.tool, step.step) == ("bonzo_deposit_tool", "deposit")


def test_extract_swap_quote_tagged(state):
    quote = {"input": {"token": "HBAR", "amount": "10"}, "output": {"token": "SAUCE", "amount": "250"}}
    response = state("Quote ready", {"type": "SWAP_QUOTE", "quote": quote})
    assert parser.extract_swap_quote(response) == quote


def test_extract_swap_quote_untagged(state):
    quote = {"input": {"token": "HBAR"}, "output": {"token": "USDC"}, "route": ["HBAR", "USDC"]}
    assert parser.extract_swap_quote(state("q", {"quote": quote})) == quote
    assert parser.extract_swap_quote(state("q", {"quote": {"price": 1}})) is None


def test_extract_operation_context(state):
    response = state(
        "Stake prepared",
        {
            "bytes": [1],
            "operationContext": {
                "protocol": "saucerswap",
                "operation": "stake_sauce",
                "amountLabel": "100 SAUCE",
                "tokenIds": ["0.0.731861"],
            },
        },
    )
    ctx = parser.extract_operation_context(response)
    assert (ctx.protocol, ctx.operation) == ("saucerswap", "stake_sauce")
    assert ctx.amount_label == "100 SAUCE"
    assert ctx.token_ids == ["0.0.731861"]


def test_operation_context_with_null_lists_is_kept(state):
    response = state(
        "Association prepared",
        {
            "bytes": [1],
            "operationContext": {
                "protocol": "saucerswap",
                "operation": "associate_tokens",
                "tokenIds": None,
                "originalParams": None,
            },
        },
    )
    ctx = parser.extract_operation_context(response)
    assert (ctx.protocol, ctx.operation) == ("saucerswap", "associate_tokens")
    assert ctx.token_ids == []
    assert ctx.original_params == {}


def test_malformed_operation_context_does_not_mask_earlier_one(state):
    response = state(
        "x",
        {"operationContext": {"protocol": "bonzo", "operation": "deposit"}},
        {"operationContext": {"protocol": "saucerswap", "tokenIds": "not-a-list"}},
    )
    ctx = parser.extract_operation_context(response)
    assert (ctx.protocol, ctx.operation) == ("bonzo", "deposit")


def test_nothing_to_extract_from_plain_answer(state):
    response = state("Your balance is 10 HBAR")
    assert parser.extract_output_text(response) == "Your balance is 10 HBAR"
    assert parser.extract_transaction_bytes(response) is None
    assert parser.extract_next_step(response) is None
    assert parser.extract_swap_quote(response) is None
    assert parser.extract_operation_context(response) is None
