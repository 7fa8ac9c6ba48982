# services/dispatcher.py
"""
Command dispatcher

- One entry point: `handle(user_id, raw_text) -> Reply`
- A pending clarification is resolved before any fresh classification
- Every intent has exactly one executor; the table is checked when the dispatcher is built
- Nothing raised by a handler escapes `handle`
"""

from datetime import datetime
from typing import Dict, Optional

from configurations.logging_config import get_logger
from core.clock import Clock, SystemClock
from core.dialogue_state import DialogueState
from core.errors import (
    CollaboratorError,
    InternalInvariantViolation,
    MissingEntity,
    ValidationFailure,
)
from core.intent import Command, IntentType
from executors.base import BaseExecutor
from executors.budget import CheckBudgetExecutor, SetBudgetExecutor
from executors.conversation import HelpExecutor, TipsExecutor, UnknownExecutor
from executors.goal import (
    CreateGoalExecutor,
    DeleteGoalExecutor,
    UpdateGoalExecutor,
    ViewGoalExecutor,
)
from executors.report import HistoryExecutor, ReportExecutor
from executors.transaction import TransactionExecutor
from models.reply import ConfirmationReply, Reply, TextReply
from models.transaction import TransactionType
from services.collaborator import GuardedStorage
from services.context_store import ContextStore, DialogueContext, PendingAction
from services.entity_extractor import (
    CATEGORIES,
    GOAL_DELETE_VERBS,
    extract_amount,
    extract_category,
    extract_entities,
)
from services.goal_feasibility import FeasibilityEngine
from services.goal_service import GoalService
from services.insight_service import StorageInsightProvider
from services.intent_classifier import CLASSIFIER, IntentClassifier
from services.normalizer import NormalizedText, normalize
from services.sentiment import SentimentResult, score
from storage.base import InsightProvider, StorageBackend

logger = get_logger("dispatcher")

AFFIRMATIVE = {"ya", "iya", "y", "yes", "ok", "oke", "benar", "betul", "setuju"}
NEGATIVE = {"tidak", "bukan", "salah", "no", "ulangi"}
CANCEL = {"batal", "batalkan", "cancel", "stop"}

# Scratch keys
PENDING_COMMAND = "pending_command"
CLARIFIED = "clarified_entities"

APOLOGY = "Maaf, layanan sedang mengalami gangguan. Silakan coba lagi sebentar lagi."
GENERIC_ERROR = "Maaf, terjadi kesalahan dalam memproses permintaan Anda."
CANCELLED = "Baik, perintah dibatalkan."


def build_executors(storage: StorageBackend, goals: GoalService, clock: Clock) -> Dict[IntentType, BaseExecutor]:
    return {
        IntentType.ADD_EXPENSE: TransactionExecutor(storage, clock, TransactionType.EXPENSE),
        IntentType.ADD_INCOME: TransactionExecutor(storage, clock, TransactionType.INCOME),
        IntentType.VIEW_REPORT: ReportExecutor(storage, clock),
        IntentType.SET_BUDGET: SetBudgetExecutor(storage, clock),
        IntentType.CHECK_BUDGET: CheckBudgetExecutor(storage, clock),
        IntentType.TRANSACTION_HISTORY: HistoryExecutor(storage),
        IntentType.CREATE_GOAL: CreateGoalExecutor(goals, clock),
        IntentType.VIEW_GOAL: ViewGoalExecutor(goals, clock),
        IntentType.UPDATE_GOAL: UpdateGoalExecutor(goals, clock),
        IntentType.DELETE_GOAL: DeleteGoalExecutor(goals),
        IntentType.TIPS: TipsExecutor(goals, clock),
        IntentType.HELP: HelpExecutor(),
        IntentType.UNKNOWN: UnknownExecutor(),
    }


def first_word(text: str) -> str:
    words = text.split()
    return words[0] if words else ""


def is_present(command: Command, entity: str) -> bool:
    e = command.entities
    if entity == "amount":
        # Zero or negative amounts are asked for again
        return e.amount is not None and e.amount > 0
    if entity == "category":
        return e.has_category()
    raise InternalInvariantViolation(f"Unknown required entity '{entity}'")


class Dispatcher:
    def __init__(
        self,
        storage: StorageBackend,
        *,
        clock: Optional[Clock] = None,
        insights: Optional[InsightProvider] = None,
        contexts: Optional[ContextStore] = None,
        classifier: Optional[IntentClassifier] = None,
        executors: Optional[Dict[IntentType, BaseExecutor]] = None,
    ):
        self.clock = clock or SystemClock()
        self.storage = GuardedStorage(storage)
        self.feasibility = FeasibilityEngine(insights or StorageInsightProvider(storage, self.clock))
        self.goals = GoalService(self.storage, self.feasibility, self.clock)
        self.contexts = contexts or ContextStore(self.clock)
        self.classifier = classifier or CLASSIFIER
        self.executors = executors or build_executors(self.storage, self.goals, self.clock)

        missing = [intent.value for intent in IntentType if intent not in self.executors]
        if missing:
            raise InternalInvariantViolation(f"No executor for intents: {', '.join(missing)}")

    # -----------------------------
    # Entry point
    # -----------------------------
    async def handle(self, user_id: str, raw_text: str) -> Reply:
        logger.info(f"[REQUEST_START] user_id={user_id}, text_length={len(raw_text or '')}")
        try:
            async with self.contexts.session(user_id) as context:
                reply = await self._handle_in_context(context, raw_text or "")
        except Exception:
            logger.exception(f"[ERROR] user_id={user_id}, context unavailable")
            reply = TextReply(content=GENERIC_ERROR)
        logger.info(f"[REQUEST_END] user_id={user_id}, kind={reply.kind}")
        return reply

    async def _handle_in_context(self, context: DialogueContext, raw_text: str) -> Reply:
        now = self.clock.now()
        text = normalize(raw_text)
        sentiment = score(text)

        try:
            reply = await self._route(context, raw_text, text, sentiment, now)
        except CollaboratorError as e:
            logger.error(f"[COLLABORATOR_FAILURE] user_id={context.user_id}, error={e}")
            context.fail(now)
            reply = TextReply(content=APOLOGY)
        except InternalInvariantViolation:
            logger.exception(f"[INVARIANT_VIOLATION] user_id={context.user_id}")
            context.reset(now)
            reply = TextReply(content=GENERIC_ERROR)
        except Exception as e:
            logger.exception(f"[ERROR] user_id={context.user_id}, exception={e}")
            context.fail(now)
            reply = TextReply(content=GENERIC_ERROR)

        if sentiment.advisories:
            reply.advisories = [f"{a.message} {a.suggestion}" for a in sentiment.advisories]
        reply.suggestions = context.state.suggestions()
        logger.info(f"[CONTEXT] user_id={context.user_id}, {context.summary(now)}")
        return reply

    async def _route(
        self,
        context: DialogueContext,
        raw_text: str,
        text: NormalizedText,
        sentiment: SentimentResult,
        now: datetime,
    ) -> Reply:
        if context.state is DialogueState.ERROR:
            # Any reply leaves the error state, then counts as a fresh message
            context.return_to_idle()
        elif context.state.is_awaiting():
            reply = await self._continue_dialogue(context, text, now)
            if reply is not None:
                return reply

        return await self._handle_fresh(context, raw_text, text, sentiment, now)

    # -----------------------------
    # Fresh commands
    # -----------------------------
    async def _handle_fresh(
        self,
        context: DialogueContext,
        raw_text: str,
        text: NormalizedText,
        sentiment: SentimentResult,
        now: datetime,
    ) -> Reply:
        classification = self.classifier.classify_with_confidence(text)
        intent = classification.intent
        entities = extract_entities(text, intent, now)

        command = Command(
            user_id=context.user_id,
            raw_input=raw_text,
            text=text,
            intent=intent,
            entities=entities,
            sentiment=sentiment,
            meta={"confidence": classification.confidence, "reason": classification.reason},
        )
        context.last_intent = intent
        context.last_entities = entities

        logger.info(
            f"[INTENT] user_id={context.user_id}, type={intent.value}, "
            f"confidence={classification.confidence:.3f}, text='{text[:100]}'"
        )

        executor = self.executors[intent]
        usage = executor.usage(command)
        if usage is not None:
            return usage

        try:
            self._require_entities(executor, command)
        except MissingEntity as e:
            return self._ask_for(context, command, e.field, now)

        return await self._execute(context, command)

    async def _execute(self, context: DialogueContext, command: Command) -> Reply:
        try:
            reply = await self.executors[command.intent].execute(command)
        except MissingEntity:
            raise
        except ValidationFailure as e:
            logger.info(f"[VALIDATION] user_id={context.user_id}, field={e.field}, message={e}")
            reply = TextReply(content=f"⚠️ {e}")
        context.return_to_idle()
        return reply

    @staticmethod
    def _require_entities(executor: BaseExecutor, command: Command) -> None:
        for entity in executor.required_entities:
            if not is_present(command, entity):
                raise MissingEntity(entity)

    # -----------------------------
    # Multi-turn dialogue
    # -----------------------------
    def _ask_for(self, context: DialogueContext, command: Command, entity: str, now: datetime) -> Reply:
        context.set_scratch(PENDING_COMMAND, command, now)
        context.add_pending_action(
            PendingAction(intent=command.intent, entity=entity, created_at=now)
        )
        context.transition(DialogueState.awaiting(entity), now)
        return TextReply(content=self.executors[command.intent].prompt_for(entity, command))

    def _ask_confirmation(self, context: DialogueContext, command: Command, now: datetime) -> Reply:
        context.set_scratch(PENDING_COMMAND, command, now)
        context.transition(DialogueState.AWAITING_CONFIRMATION, now)
        return ConfirmationReply(prompt=self.executors[command.intent].describe(command))

    def _pending(self, context: DialogueContext, now: datetime) -> Command:
        command = context.get_scratch(PENDING_COMMAND, now)
        if not isinstance(command, Command):
            raise InternalInvariantViolation(
                f"Context in state {context.state.value} has no pending command"
            )
        return command

    def _repeat_prompt(self, context: DialogueContext, command: Command) -> Reply:
        executor = self.executors[command.intent]
        if context.state is DialogueState.AWAITING_CONFIRMATION:
            return ConfirmationReply(prompt=executor.describe(command))
        return TextReply(content=executor.prompt_for(context.state.awaited_entity(), command))

    async def _continue_dialogue(
        self, context: DialogueContext, text: NormalizedText, now: datetime
    ) -> Optional[Reply]:
        """
        Resolve the message as an answer to the pending prompt.
        Returns None when the message should be handled as a fresh command.
        """
        command = self._pending(context, now)
        word = first_word(text)

        # "batalkan goal rumah" deletes a goal; it does not cancel the dialogue
        if word in CANCEL and not text.startswith(tuple(GOAL_DELETE_VERBS)):
            logger.info(f"[DIALOGUE_CANCELLED] user_id={context.user_id}, intent={command.intent.value}")
            context.return_to_idle()
            return TextReply(content=CANCELLED)

        if context.state is DialogueState.AWAITING_CONFIRMATION:
            if word in AFFIRMATIVE:
                return await self._execute(context, command)
            if word in NEGATIVE:
                clarified = context.get_scratch(CLARIFIED, now, default=[])
                entity = clarified[-1] if clarified else self.executors[command.intent].required_entities[0]
                return self._ask_for(context, command.model_copy(update={"entities": command.entities.without(entity)}), entity, now)
        else:
            answered = self._answer(context.state.awaited_entity(), command, text)
            if answered is not None:
                return self._after_answer(context, answered, context.state.awaited_entity(), now)

        # Not an answer: a recognizable command replaces the pending one
        intent = self.classifier.classify(text)
        if intent.is_known() and intent is not command.intent:
            logger.info(
                f"[DIALOGUE_ABANDONED] user_id={context.user_id}, "
                f"pending={command.intent.value}, new={intent.value}"
            )
            context.return_to_idle()
            return None
        return self._repeat_prompt(context, command)

    def _answer(self, entity: str, command: Command, text: NormalizedText) -> Optional[Command]:
        """The pending command with `entity` filled from the message, or None."""
        if entity == "amount":
            intent = self.classifier.classify(text)
            if intent.is_known() and intent is not command.intent:
                return None
            amount = extract_amount(text)
            if amount is None or amount <= 0:
                return None
            return command.model_copy(update={"entities": command.entities.with_amount(amount)})

        if entity == "category":
            category = extract_category(text)
            if category == CATEGORIES[-1]:
                category = next((c for c in CATEGORIES[:-1] if c.lower() == text.strip()), None)
            if category is None:
                return None
            return command.model_copy(
                update={"entities": command.entities.model_copy(update={"category": category})}
            )

        raise InternalInvariantViolation(f"Cannot resolve an answer for entity '{entity}'")

    def _after_answer(self, context: DialogueContext, command: Command, entity: str, now: datetime) -> Reply:
        context.next_pending_action()
        clarified = context.get_scratch(CLARIFIED, now, default=[])
        context.set_scratch(CLARIFIED, clarified + [entity], now)

        try:
            self._require_entities(self.executors[command.intent], command)
        except MissingEntity as e:
            return self._ask_for(context, command, e.field, now)
        return self._ask_confirmation(context, command, now)
