"""
System instructions for the chat completion provider.

Passed as the system message ahead of the user prompt built by
``stockpick.prompts``.
"""

from __future__ import annotations


ANALYST_INSTRUCTIONS = (
    "당신은 주식과 ETF 분석에 전문적인 투자 애널리스트입니다. "
    "주어진 정보를 바탕으로 상세하고 전문적인 투자 분석 보고서를 작성하세요."
)


def get_instructions() -> str:
    return ANALYST_INSTRUCTIONS
