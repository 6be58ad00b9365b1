"""Output templates and their platform converters."""

from parley.output.dialogflow import DialogflowOutputConverter, EntityOverrideMode
from parley.output.models import (
    Card,
    DynamicEntities,
    DynamicEntitiesMode,
    DynamicEntity,
    DynamicEntityValue,
    ListenValue,
    Message,
    OutputTemplate,
    PlatformOutputTemplate,
    QuickReply,
)
from parley.output.sanitize import SanitizationOptions, TruncationWarning
from parley.output.strategy import OutputConverterStrategy, RendererRegistry, merge_output_templates

__all__ = [
    "Card",
    "DialogflowOutputConverter",
    "DynamicEntities",
    "DynamicEntitiesMode",
    "DynamicEntity",
    "DynamicEntityValue",
    "EntityOverrideMode",
    "ListenValue",
    "Message",
    "OutputConverterStrategy",
    "OutputTemplate",
    "PlatformOutputTemplate",
    "QuickReply",
    "RendererRegistry",
    "SanitizationOptions",
    "TruncationWarning",
    "merge_output_templates",
]
