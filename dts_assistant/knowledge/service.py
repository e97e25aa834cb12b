"""
Сервис базы знаний для чата.

get_formatted_knowledge_base() - единственная точка, через которую чат
получает текст базы знаний:
1. документ читается из хранилища (ошибка чтения == документа нет)
2. политика свежести решает, нужно ли обновление
3. документа нет -> ставим полный обход в очередь и ждём его ограниченное время,
   не дождались или обход упал -> резервный текст
4. документ есть, но устарел -> ставим обновление в очередь, не ждём,
   отдаём текущий документ
5. любая ошибка базы знаний -> резервный текст

Обновления выполняет один фоновый обработчик очереди, поэтому записи
в хранилище внутри процесса идут строго по одной.
"""

import asyncio
import contextlib
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from uuid import uuid4

from dts_assistant.config import KnowledgeBaseConfig, get_kb_config
from dts_assistant.knowledge.errors import KnowledgeBaseError
from dts_assistant.knowledge.faq import FALLBACK_KNOWLEDGE
from dts_assistant.knowledge.formatter import render
from dts_assistant.knowledge.freshness import FreshnessDecision, FreshnessPolicy
from dts_assistant.knowledge.updater import KnowledgeBaseUpdater, UpdateResult
from dts_assistant.logging_config import bind_context, clear_context, get_logger
from dts_assistant.time_utils import utc_now

logger = get_logger(__name__)


class JobStatus(StrEnum):
    QUEUED = 'queued'
    RUNNING = 'running'
    SUCCEEDED = 'succeeded'
    FAILED = 'failed'


@dataclass
class RefreshJob:
    """
    Задание на обновление базы знаний.

    Attributes:
        decision: Решение политики свежести, которое нужно выполнить
        status: Текущее состояние задания
        result: Итог обновления (при успехе)
        error: Текст ошибки (при неудаче)
        done: Future, завершается по окончании задания (успешном или нет)
    """

    decision: FreshnessDecision
    done: asyncio.Future
    job_id: str = field(default_factory=lambda: uuid4().hex[:8])
    status: JobStatus = JobStatus.QUEUED
    created_at: datetime = field(default_factory=utc_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    result: UpdateResult | None = None
    error: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status in (JobStatus.QUEUED, JobStatus.RUNNING)

    async def wait(self, timeout: float | None = None) -> 'RefreshJob':
        """
        Ждёт завершения задания; отмена ожидания не отменяет само задание.

        Raises:
            TimeoutError: Задание не завершилось за timeout секунд
        """
        await asyncio.wait_for(asyncio.shield(self.done), timeout=timeout)
        return self


class KnowledgeBaseService:
    """
    Выдача текста базы знаний с фоновым обновлением.

    Пример:
        async with KnowledgeBaseService.from_config(get_kb_config()) as service:
            text = await service.get_formatted_knowledge_base()
    """

    def __init__(
        self,
        updater: KnowledgeBaseUpdater,
        policy: FreshnessPolicy | None = None,
        initial_crawl_wait: float = 25.0,
        fallback_text: str = FALLBACK_KNOWLEDGE,
    ):
        self.updater = updater
        self.policy = policy or FreshnessPolicy(site_map=updater.site_map)
        self.initial_crawl_wait = initial_crawl_wait
        self.fallback_text = fallback_text

        self._queue: asyncio.Queue[RefreshJob] | None = None
        self._worker: asyncio.Task | None = None
        self._active_job: RefreshJob | None = None
        self._last_job: RefreshJob | None = None

    @classmethod
    def from_config(cls, config: KnowledgeBaseConfig) -> 'KnowledgeBaseService':
        updater = KnowledgeBaseUpdater.from_config(config)
        policy = FreshnessPolicy(
            static_max_age=config.freshness.static_max_age,
            dynamic_max_age=config.freshness.dynamic_max_age,
            site_map=updater.site_map,
        )
        return cls(
            updater,
            policy=policy,
            initial_crawl_wait=config.service.initial_crawl_wait_seconds,
        )

    @property
    def last_job(self) -> RefreshJob | None:
        """Последнее поставленное задание (для отчёта о состоянии)"""
        return self._last_job

    @property
    def is_running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    # ------------------------------------------------------------------
    # Жизненный цикл обработчика
    # ------------------------------------------------------------------

    def _ensure_worker(self) -> None:
        if self.is_running:
            return
        if self._queue is None:
            self._queue = asyncio.Queue()
        self._worker = asyncio.create_task(self._run_worker(), name='kb-refresh-worker')
        logger.debug('refresh_worker_started')

    async def start(self) -> None:
        self._ensure_worker()

    async def stop(self) -> None:
        """
        Останавливает обработчик; обход, идущий в этот момент, прерывается
        """
        if self._worker is None:
            return
        self._worker.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._worker
        self._worker = None

        # задания, до которых обработчик не дошёл
        while self._queue is not None and not self._queue.empty():
            job = self._queue.get_nowait()
            self._queue.task_done()
            job.status = JobStatus.FAILED
            job.error = 'service stopped'
            job.finished_at = utc_now()
            if not job.done.done():
                job.done.set_result(job)

        logger.debug('refresh_worker_stopped')

    async def __aenter__(self) -> 'KnowledgeBaseService':
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    async def _run_worker(self) -> None:
        assert self._queue is not None
        while True:
            job = await self._queue.get()
            try:
                await self._execute(job)
            finally:
                self._queue.task_done()

    async def _execute(self, job: RefreshJob) -> None:
        job.status = JobStatus.RUNNING
        job.started_at = utc_now()
        bind_context(job_id=job.job_id)
        logger.info('refresh_job_running', action=job.decision.action.value)

        try:
            job.result = await self.updater.run(job.decision)
            job.status = JobStatus.SUCCEEDED
            logger.info(
                'refresh_job_succeeded',
                action=job.result.action.value,
                sections=job.result.refreshed_sections,
                fell_back=job.result.fell_back,
            )
        except asyncio.CancelledError:
            job.status = JobStatus.FAILED
            job.error = 'cancelled'
            raise
        except Exception as e:
            job.status = JobStatus.FAILED
            job.error = str(e) or type(e).__name__
            logger.error(
                'refresh_job_failed',
                action=job.decision.action.value,
                error=job.error,
                exc_info=True,
            )
        finally:
            job.finished_at = utc_now()
            clear_context()
            if not job.done.done():
                job.done.set_result(job)

    # ------------------------------------------------------------------
    # Публичный API
    # ------------------------------------------------------------------

    def request_refresh(self, decision: FreshnessDecision) -> RefreshJob:
        """
        Ставит обновление в очередь и сразу возвращает задание.

        Пока предыдущее задание в очереди или выполняется, возвращается оно же.
        """
        if self._active_job is not None and self._active_job.is_active:
            logger.debug('refresh_already_pending', status=self._active_job.status.value)
            return self._active_job

        self._ensure_worker()
        assert self._queue is not None

        job = RefreshJob(decision=decision, done=asyncio.get_running_loop().create_future())
        self._queue.put_nowait(job)
        self._active_job = job
        self._last_job = job

        logger.info(
            'refresh_job_queued',
            job_id=job.job_id,
            action=decision.action.value,
            stale_sections=decision.stale_sections,
        )
        return job

    async def get_formatted_knowledge_base(self) -> str:
        """
        Текст базы знаний для промпта.

        Returns:
            Отформатированный документ или резервный текст
        """
        try:
            document = self.updater.store.load()
            decision = self.policy.decide(document)

            if document is None:
                job = self.request_refresh(decision)
                try:
                    await job.wait(timeout=self.initial_crawl_wait)
                except TimeoutError:
                    logger.warning('initial_crawl_timeout', wait_seconds=self.initial_crawl_wait)
                    return self.fallback_text

                if job.status != JobStatus.SUCCEEDED or job.result is None:
                    logger.warning('initial_crawl_failed', error=job.error)
                    return self.fallback_text

                document = job.result.document or self.updater.store.load()
                if document is None:
                    return self.fallback_text
                return render(document)

            if decision.needs_refresh:
                self.request_refresh(decision)
            else:
                logger.debug('kb_served_from_cache')

            return render(document)
        except KnowledgeBaseError as e:
            logger.error('kb_unavailable', error=e.message)
            return self.fallback_text


_service: KnowledgeBaseService | None = None


def get_knowledge_base_service() -> KnowledgeBaseService:
    """
    Возвращает сервис процесса (создаётся при первом вызове)
    """
    global _service
    if _service is None:
        _service = KnowledgeBaseService.from_config(get_kb_config())
    return _service


async def get_formatted_knowledge_base() -> str:
    """
    Текст базы знаний через сервис процесса
    """
    return await get_knowledge_base_service().get_formatted_knowledge_base()
