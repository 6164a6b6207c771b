"""
Application entry point.
Configures logging, the database and the event system, and wires the use
cases to their repositories.
"""

from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from sqlalchemy.orm import Session

from invoiceme import __version__
from invoiceme.config import Settings, get_settings
from invoiceme.application.use_cases import (
    CreateInvoiceUseCase,
    UpdateInvoiceUseCase,
    AddLineItemUseCase,
    RemoveLineItemUseCase,
    SendInvoiceUseCase,
    GetInvoiceUseCase,
    ListInvoicesUseCase,
    GetDashboardStatsUseCase,
    RecordPaymentUseCase,
    GetPaymentUseCase,
    ListPaymentsByInvoiceUseCase,
    ListPaymentHistoryUseCase,
    GetPaymentStatisticsUseCase,
    CreateCustomerUseCase,
    UpdateCustomerUseCase,
    DeleteCustomerUseCase,
    GetCustomerUseCase,
    ListCustomersUseCase
)
from invoiceme.domain.events import EventDispatcher
from invoiceme.domain.services import (
    Clock,
    InvoiceNumberGenerator,
    NumberingService,
    PaymentService,
    SystemClock
)
from invoiceme.infrastructure.db import (
    SQLAlchemyUnitOfWork,
    build_engine,
    build_session_factory,
    create_all_tables
)
from invoiceme.infrastructure.events import setup_event_handlers
from invoiceme.infrastructure.repositories import (
    SQLAlchemyCustomerRepository,
    SQLAlchemyInvoiceRepository,
    SQLAlchemyPaymentRepository,
    SQLAlchemyInvoiceSequenceRepository
)


logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else settings.log_level,
        format=LOG_FORMAT
    )
    if not settings.database_echo:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


class Services:
    """
    Repositories and use cases bound to one database session.
    Every command use case commits through the same unit of work.
    """

    def __init__(self, application: "Application", session: Session):
        settings = application.settings
        dispatcher = application.event_dispatcher
        clock = application.clock

        self.session = session
        self.unit_of_work = SQLAlchemyUnitOfWork(session)

        # Repositories
        self.customer_repository = SQLAlchemyCustomerRepository(session)
        self.invoice_repository = SQLAlchemyInvoiceRepository(session)
        self.payment_repository = SQLAlchemyPaymentRepository(session)
        self.sequence_repository = SQLAlchemyInvoiceSequenceRepository(session)

        self.number_generator = InvoiceNumberGenerator(
            self.sequence_repository, clock, application.numbering_service
        )

        # Invoice use cases
        self.create_invoice = CreateInvoiceUseCase(
            self.invoice_repository,
            self.customer_repository,
            self.number_generator,
            self.unit_of_work,
            dispatcher,
            default_payment_terms=settings.default_payment_terms
        )
        self.update_invoice = UpdateInvoiceUseCase(
            self.invoice_repository, self.customer_repository, self.unit_of_work, dispatcher
        )
        self.add_line_item = AddLineItemUseCase(self.invoice_repository, self.unit_of_work, dispatcher)
        self.remove_line_item = RemoveLineItemUseCase(self.invoice_repository, self.unit_of_work, dispatcher)
        self.send_invoice = SendInvoiceUseCase(self.invoice_repository, self.unit_of_work, dispatcher)
        self.get_invoice = GetInvoiceUseCase(self.invoice_repository)
        self.list_invoices = ListInvoicesUseCase(
            self.invoice_repository, settings.default_page_size, settings.max_page_size
        )
        self.get_dashboard_stats = GetDashboardStatsUseCase(
            self.invoice_repository, self.customer_repository, clock
        )

        # Payment use cases
        self.record_payment = RecordPaymentUseCase(
            self.invoice_repository,
            self.payment_repository,
            application.payment_service,
            self.unit_of_work,
            dispatcher
        )
        self.get_payment = GetPaymentUseCase(self.payment_repository)
        self.list_payments_by_invoice = ListPaymentsByInvoiceUseCase(
            self.invoice_repository, self.payment_repository
        )
        self.list_payment_history = ListPaymentHistoryUseCase(
            self.payment_repository, settings.default_page_size, settings.max_page_size
        )
        self.get_payment_statistics = GetPaymentStatisticsUseCase(self.payment_repository, clock)

        # Customer use cases
        self.create_customer = CreateCustomerUseCase(self.customer_repository, self.unit_of_work, dispatcher)
        self.update_customer = UpdateCustomerUseCase(self.customer_repository, self.unit_of_work, dispatcher)
        self.delete_customer = DeleteCustomerUseCase(self.customer_repository, self.unit_of_work, dispatcher)
        self.get_customer = GetCustomerUseCase(self.customer_repository, self.invoice_repository)
        self.list_customers = ListCustomersUseCase(
            self.customer_repository,
            self.invoice_repository,
            settings.default_page_size,
            settings.max_page_size
        )


class Application:
    """
    Process-wide objects: settings, engine, event dispatcher and the
    stateless domain services. Per-request objects come from ``session_scope``.
    """

    def __init__(self, settings: Optional[Settings] = None, clock: Optional[Clock] = None):
        self.settings = settings or get_settings()
        self.clock = clock or SystemClock()

        self.engine = build_engine(self.settings.database_url, echo=self.settings.database_echo)
        self.session_factory = build_session_factory(self.engine)

        self.event_dispatcher = setup_event_handlers(EventDispatcher())

        self.numbering_service = NumberingService(
            prefix=self.settings.invoice_number_prefix,
            width=self.settings.invoice_sequence_width
        )
        self.payment_service = PaymentService(self.clock)

    def create_schema(self) -> None:
        create_all_tables(self.engine)

    @contextmanager
    def session_scope(self) -> Iterator[Services]:
        """
        Open a session and yield the services bound to it.
        The session is closed afterwards; uncommitted work is discarded.
        """
        session = self.session_factory()
        try:
            yield Services(self, session)
        finally:
            session.close()

    def dispose(self) -> None:
        """Release pooled database connections."""
        self.engine.dispose()


def create_application(settings: Optional[Settings] = None, clock: Optional[Clock] = None) -> Application:
    """
    Create and configure the application.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    application = Application(settings, clock)
    application.create_schema()

    logger.info(f"Starting InvoiceMe v{__version__}")
    logger.info(f"Environment: {settings.environment}")

    return application
