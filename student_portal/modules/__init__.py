"""Domain modules package."""

from student_portal.modules.attendance import models as attendance_models  # noqa: F401
from student_portal.modules.audit import models as audit_models  # noqa: F401
from student_portal.modules.batches import models as batches_models  # noqa: F401
from student_portal.modules.certificates import models as certificates_models  # noqa: F401
from student_portal.modules.classes import models as classes_models  # noqa: F401
from student_portal.modules.enrollment import models as enrollment_models  # noqa: F401
from student_portal.modules.events import models as events_models  # noqa: F401
from student_portal.modules.locations import models as locations_models  # noqa: F401
from student_portal.modules.notifications import models as notifications_models  # noqa: F401
from student_portal.modules.payments import models as payments_models  # noqa: F401
from student_portal.modules.skills import models as skills_models  # noqa: F401
from student_portal.modules.students import models as students_models  # noqa: F401
