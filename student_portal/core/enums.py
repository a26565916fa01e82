"""Core enums used across modules."""

from enum import StrEnum


class BatchStatusEnum(StrEnum):
    """Batch lifecycle status as maintained by the admin portal."""

    PENDING = "Pending"
    APPROVED = "Approved"
    STARTED = "Started"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


class SeatReservationStatusEnum(StrEnum):
    """Outcome of a seat reservation attempt."""

    OK = "ok"
    FULL = "full"
    NOT_FOUND = "not_found"


class PaymentTypeEnum(StrEnum):
    """Payment plan chosen by the student."""

    FULL = "full"
    EMI = "emi"


class PaymentSourceEnum(StrEnum):
    """Channel through which a payment record was created."""

    CHECKOUT = "checkout"
    WEBHOOK = "webhook"
    MANUAL = "manual"
    SYNC = "sync"


class AttendanceStatusEnum(StrEnum):
    """Attendance mark for a session."""

    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class SkillModuleEnum(StrEnum):
    """Learning skill modules."""

    LISTENING = "listening"
    READING = "reading"
    SPEAKING = "speaking"
    WRITING = "writing"


class AttemptStatusEnum(StrEnum):
    """Speaking and writing attempt status."""

    DRAFT = "draft"
    SUBMITTED = "submitted"


class EventStatusEnum(StrEnum):
    """Academic calendar event status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class AssessmentStatusEnum(StrEnum):
    """Assessment marks entry status."""

    DRAFT = "draft"
    SUBMITTED = "submitted"


class CertificateStatusEnum(StrEnum):
    """Certificate generation status."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class NotificationStatusEnum(StrEnum):
    """Notification delivery status."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class OutboxStatusEnum(StrEnum):
    """Outbox event status for integration publishing."""

    PENDING = "pending"
    PROCESSED = "processed"
    FAILED = "failed"
