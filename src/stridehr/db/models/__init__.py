# src/stridehr/db/models/__init__.py
"""
Importing this package registers every StrideHR table on ``Base.metadata``.

Alembic's env.py, the initial-schema revision and the drift check all import
it before touching metadata.
"""
from __future__ import annotations

from types import ModuleType

from stridehr.db.base import Base

from . import (
    assets,
    attendance,
    chatbot,
    documents,
    employees,
    expenses,
    grievances,
    identity,
    integrations,
    knowledge_base,
    leave,
    notifications,
    organization,
    payroll,
    performance,
    projects,
    reports,
    shifts,
    support,
    surveys,
    training,
)
from .assets import Asset, AssetAssignment, AssetHandover, AssetMaintenance
from .attendance import (
    AttendanceCorrection,
    AttendancePolicy,
    AttendanceRecord,
    BreakRecord,
    Holiday,
    WorkingHours,
)
from .chatbot import (
    ChatbotConversation,
    ChatbotKnowledgeBase,
    ChatbotKnowledgeBaseFeedback,
    ChatbotLearningData,
    ChatbotMessage,
)
from .documents import (
    DocumentApproval,
    DocumentAuditLog,
    DocumentRetentionExecution,
    DocumentRetentionPolicy,
    DocumentSignature,
    DocumentTemplate,
    DocumentTemplateVersion,
    GeneratedDocument,
)
from .employees import Employee, EmployeeExit, EmployeeOnboarding, EmployeeOnboardingTask
from .expenses import (
    ExpenseApprovalHistory,
    ExpenseBudget,
    ExpenseBudgetAlert,
    ExpenseCategory,
    ExpenseClaim,
    ExpenseComplianceViolation,
    ExpenseDocument,
    ExpenseItem,
    ExpensePolicyRule,
    TravelExpense,
    TravelExpenseItem,
)
from .grievances import (
    Grievance,
    GrievanceComment,
    GrievanceEscalation,
    GrievanceFollowUp,
    GrievanceStatusHistory,
)
from .identity import (
    AuditLog,
    EmployeeRole,
    Permission,
    RefreshToken,
    Role,
    RolePermission,
    User,
    UserSession,
)
from .integrations import (
    CalendarIntegration,
    ExternalIntegration,
    IntegrationLog,
    WebhookDelivery,
    WebhookSubscription,
)
from .knowledge_base import (
    KnowledgeBaseCategory,
    KnowledgeBaseDocument,
    KnowledgeBaseDocumentApproval,
    KnowledgeBaseDocumentAttachment,
    KnowledgeBaseDocumentComment,
    KnowledgeBaseDocumentView,
)
from .leave import (
    LeaveAccrual,
    LeaveAccrualRule,
    LeaveApprovalHistory,
    LeaveBalance,
    LeaveCalendar,
    LeaveEncashment,
    LeavePolicy,
    LeaveRequest,
)
from .notifications import (
    EmailCampaign,
    EmailLog,
    EmailTemplate,
    Notification,
    NotificationTemplate,
    UserNotificationPreference,
)
from .organization import Branch, Department, Organization
from .payroll import (
    ExchangeRate,
    PayrollAdjustment,
    PayrollFormula,
    PayrollRecord,
    PayslipApprovalHistory,
    PayslipGeneration,
    PayslipTemplate,
)
from .performance import (
    PerformanceFeedback,
    PerformanceGoal,
    PerformanceGoalCheckIn,
    PerformanceImprovementPlan,
    PerformanceReview,
    PIPGoal,
    PIPReview,
)
from .projects import (
    DSR,
    Project,
    ProjectActivity,
    ProjectAlert,
    ProjectAssignment,
    ProjectComment,
    ProjectRisk,
    ProjectTask,
    TaskAssignment,
)
from .reports import Report, ReportExecution, ReportSchedule, ReportShare, ReportTemplate
from .shifts import (
    Shift,
    ShiftAssignment,
    ShiftCoverageRequest,
    ShiftCoverageResponse,
    ShiftSwapRequest,
    ShiftSwapResponse,
)
from .support import SupportTicket, SupportTicketComment, SupportTicketStatusHistory
from .surveys import (
    Survey,
    SurveyAnalytics,
    SurveyAnswer,
    SurveyDistribution,
    SurveyQuestion,
    SurveyQuestionOption,
    SurveyResponse,
)
from .training import (
    Assessment,
    AssessmentAnswer,
    AssessmentAttempt,
    AssessmentQuestion,
    Certification,
    TrainingAssignment,
    TrainingModule,
    TrainingProgress,
)

_DOMAIN_MODULES: dict[str, ModuleType] = {
    "organization": organization,
    "employees": employees,
    "identity": identity,
    "attendance": attendance,
    "shifts": shifts,
    "projects": projects,
    "payroll": payroll,
    "leave": leave,
    "performance": performance,
    "training": training,
    "assets": assets,
    "support": support,
    "notifications": notifications,
    "chatbot": chatbot,
    "knowledge_base": knowledge_base,
    "documents": documents,
    "reports": reports,
    "surveys": surveys,
    "grievances": grievances,
    "expenses": expenses,
    "integrations": integrations,
}


def _module_models(module: ModuleType) -> list[type[Base]]:
    return [
        obj
        for obj in vars(module).values()
        if isinstance(obj, type)
        and issubclass(obj, Base)
        and obj.__module__ == module.__name__
        and hasattr(obj, "__table__")
    ]


# domain name -> table names, in declaration order
DOMAINS: dict[str, tuple[str, ...]] = {
    domain: tuple(m.__tablename__ for m in _module_models(module))
    for domain, module in _DOMAIN_MODULES.items()
}

ALL_MODELS: tuple[type[Base], ...] = tuple(
    model for module in _DOMAIN_MODULES.values() for model in _module_models(module)
)


def domain_of(table_name: str) -> str | None:
    for domain, tables in DOMAINS.items():
        if table_name in tables:
            return domain
    return None


__all__ = [
    "Base",
    "ALL_MODELS",
    "DOMAINS",
    "domain_of",
] + [m.__name__ for m in ALL_MODELS]
