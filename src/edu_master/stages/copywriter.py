"""Stage 3: promotional copy and notices."""

from __future__ import annotations

from edu_master.models.artifacts import MarkdownReport
from edu_master.stages.base import (
    PLAN_REQUIRED_MESSAGE,
    PreparedPrompt,
    StageController,
    prepare_prompt,
)
from edu_master.stages.prompt_loader import load_stage_prompt

FILE_PREFIX = "홍보문구"

CHANNEL_OPTIONS = [
    "가정통신문/알림장 (학부모 대상)",
    "블로그/SNS (수강생 모집용)",
    "전단지/포스터 (오프라인)",
    "문자/카톡 안내 메시지",
    "학교 홈페이지 공지",
    "학부모 설명회 대본",
]


def default_benefit(learning_goal: str) -> str:
    goal = learning_goal.strip()
    return f"이 수업을 통해 {goal} 할 수 있습니다." if goal else ""


class CopywriterController(StageController):
    """Streams copy for a channel; the result lives only in ApiState."""

    stage_name = "copywriter"

    def prepare(self, channel: str, benefit: str | None = None) -> PreparedPrompt:
        state = self._store.state
        if benefit is None or not benefit.strip():
            benefit = default_benefit(state.learning_goal)
        return prepare_prompt(
            load_stage_prompt("copywriter"),
            topic=state.topic,
            target=state.target_audience,
            benefit=benefit.strip(),
            channel=channel,
        )

    async def generate(
        self,
        channel: str = CHANNEL_OPTIONS[0],
        benefit: str | None = None,
    ) -> str | None:
        if not self._store.state.has_plan:
            self._fail(PLAN_REQUIRED_MESSAGE)
            return None
        return await self._run_stream(self.prepare(channel, benefit), action="promotion_copy")

    def artifact(self) -> MarkdownReport | None:
        if not self.api_state.output:
            return None
        return MarkdownReport(
            title=f"{self._store.state.topic} 홍보안",
            text=self.api_state.output,
            file_prefix=FILE_PREFIX,
        )
