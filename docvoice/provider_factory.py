"""Provider factory helpers for transcript, narration, and merge stages.

Responsibilities:
- Map the tagged `ModelProvider` choice to a concrete transcript provider.
- Build only the collaborators a run plan actually needs.
"""

from __future__ import annotations

from dataclasses import dataclass

from .audio.concatenator import AudioConcatenator, FfmpegConcatenator
from .config import DocvoiceConfig, ModelProvider
from .llm.transcript import OllamaTranscriptProvider, OpenAITranscriptProvider, TranscriptProvider
from .models.datatypes import PipelineStage, RunPlan
from .tts.narrator import NarrationProvider, OpenAINarrationProvider


@dataclass(frozen=True, slots=True)
class PipelineCollaborators:
    """External collaborators handed to the orchestrator for one run."""

    transcript_provider: TranscriptProvider | None = None
    narrator: NarrationProvider | None = None
    concatenator: AudioConcatenator | None = None


class ProviderFactory:
    """Factory for provider-backed stage collaborators used by the pipeline."""

    @staticmethod
    def create_transcript_provider(
        provider: ModelProvider, config: DocvoiceConfig
    ) -> TranscriptProvider:
        """Create the transcript provider selected for this run."""

        if provider is ModelProvider.LOCAL:
            return OllamaTranscriptProvider(
                model=config.ollama_model,
                base_url=config.ollama_base_url,
            )
        if provider is ModelProvider.REMOTE:
            return OpenAITranscriptProvider(
                model=config.openai_model,
                api_key=config.openai_api_key,
                base_url=config.openai_base_url,
            )
        raise ValueError(f"Unsupported transcript provider `{provider}`.")

    @staticmethod
    def create_narrator(config: DocvoiceConfig) -> NarrationProvider:
        """Create the OpenAI narration provider."""

        return OpenAINarrationProvider(
            api_key=config.openai_api_key,
            model=config.tts_model,
            voice=config.tts_voice,
            base_url=config.openai_base_url,
        )

    @staticmethod
    def create_concatenator() -> AudioConcatenator:
        """Create the ffmpeg-backed audio concatenator."""

        return FfmpegConcatenator()

    @classmethod
    def for_plan(cls, plan: RunPlan, config: DocvoiceConfig) -> PipelineCollaborators:
        """Create the collaborators required by the stages in `plan`."""

        stages = set(plan.stages)
        transcript_provider = (
            cls.create_transcript_provider(config.model_provider, config)
            if PipelineStage.TRANSCRIPT in stages
            else None
        )
        narrator = (
            cls.create_narrator(config)
            if stages & {PipelineStage.NARRATION, PipelineStage.INTRO}
            else None
        )
        concatenator = cls.create_concatenator() if PipelineStage.MERGE in stages else None
        return PipelineCollaborators(
            transcript_provider=transcript_provider,
            narrator=narrator,
            concatenator=concatenator,
        )
