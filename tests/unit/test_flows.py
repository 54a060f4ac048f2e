import pytest

from agent_relay.agents.flows import (
    FOLLOW_UP_INSTRUCTIONS,
    SUMMARY_TEMPLATES,
    build_follow_up_instruction,
    build_operation_summary,
)
from agent_relay.models.flow import OperationContext, PendingStep


# ---------- follow-up instructions ----------

def test_bonzo_approval_instruction():
    step = PendingStep(tool="bonzo_deposit_tool", step="approval", original_params={"token": "usdc", "amount": 25})
    text = build_follow_up_instruction(step, "0.0.5")
    assert text.startswith("Use bonzo_approve_step_tool to approve 25 USDC")
    assert 'userAccountId "0.0.5"' in text


def test_bonzo_deposit_instruction_defaults_referral():
    step = PendingStep(tool="bonzo_deposit_tool", step="deposit", original_params={"token": "hbar", "amount": 3})
    text = build_follow_up_instruction(step, "0.0.5")
    assert "deposit 3 HBAR for account 0.0.5" in text
    assert text.endswith("referral code 0")


def test_infinity_pool_steps():
    approval = PendingStep(tool="saucerswap_infinity_pool_tool", step="approval")
    stake = PendingStep(tool="saucerswap_infinity_pool_tool", step="stake", original_params={"sauceAmount": 40})

    assert "sauceAmount 100" in build_follow_up_instruction(approval, "0.0.7")
    stake_text = build_follow_up_instruction(stake, "0.0.7")
    assert stake_text.startswith("Use saucerswap_infinity_pool_step_tool to stake 40 SAUCE for account 0.0.7")
    assert '"sauceAmount": 40' in stake_text


def test_unknown_pair_falls_back_to_generic_instruction():
    assert build_follow_up_instruction(PendingStep(tool="x", step="approval"), "0.0.1") == (
        "Execute approval step for x"
    )


def test_generic_instruction_carries_params():
    step = PendingStep(tool="x", step="approval", original_params={"amount": 1})
    text = build_follow_up_instruction(step, "0.0.1")
    assert text == 'Execute approval step for x with originalParams {"amount": 1} and userAccountId "0.0.1"'


def test_additional_instructions_are_appended():
    step = PendingStep(tool="x", step="approval", next_step_instructions="then stake")
    assert build_follow_up_instruction(step, "0.0.1").endswith("\n\nAdditional instructions: then stake")


def test_every_table_entry_is_callable():
    for (tool, step), builder in FOLLOW_UP_INSTRUCTIONS.items():
        assert builder({}, "0.0.1")


# ---------- summaries ----------

@pytest.mark.parametrize(
    "protocol, operation, fragment",
    [
        ("saucerswap", "stake_sauce", "Staking completed: 100 SAUCE staked into Infinity Pool"),
        ("bonzo", "deposit", "Deposit completed: 100 SAUCE supplied to Bonzo Finance"),
        ("bonzo", "approve", "spending approval confirmed (100 SAUCE)"),
    ],
)
def test_summary_templates(protocol, operation, fragment):
    ctx = OperationContext(protocol=protocol, operation=operation, amount_label="100 SAUCE")
    summary = build_operation_summary(ctx)
    assert summary.startswith("# ✅ Operation completed\n\n")
    assert fragment in summary


def test_association_summary_lists_tokens():
    ctx = OperationContext(protocol="bonzo", operation="associate_tokens", token_ids=["0.0.1", "0.0.2"])
    assert "0.0.1, 0.0.2" in build_operation_summary(ctx)


def test_unknown_operation_has_no_summary():
    assert build_operation_summary(OperationContext(protocol="bonzo", operation="borrow")) is None
    assert build_operation_summary(OperationContext()) is None
    assert ("bonzo", "borrow") not in SUMMARY_TEMPLATES
