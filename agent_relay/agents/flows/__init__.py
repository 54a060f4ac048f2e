from .steps import FOLLOW_UP_INSTRUCTIONS, build_follow_up_instruction
from .summaries import SUMMARY_TEMPLATES, build_operation_summary

__all__ = [
    "FOLLOW_UP_INSTRUCTIONS",
    "build_follow_up_instruction",
    "SUMMARY_TEMPLATES",
    "build_operation_summary",
]
