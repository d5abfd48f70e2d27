"""Labeler Bot Service package exports."""

from services.action.labeler_bot.commands import Command, CommandKind, parse_command
from services.action.labeler_bot.config import (
    LabelerBotSettings,
    resolve_labeler_bot_settings,
)
from services.action.labeler_bot.domain import BotReply
from services.action.labeler_bot.implementation import DefaultLabelerBotService
from services.action.labeler_bot.runner import LabelerBotRunner
from services.action.labeler_bot.service import (
    LabelerBotService,
    build_labeler_bot_service,
)

__all__ = [
    "BotReply",
    "Command",
    "CommandKind",
    "DefaultLabelerBotService",
    "LabelerBotRunner",
    "LabelerBotService",
    "LabelerBotSettings",
    "build_labeler_bot_service",
    "parse_command",
    "resolve_labeler_bot_settings",
]
