from app.models.faculty import Faculty  # noqa: F401
from app.models.invigilator_allocation import AllocationStatus, InvigilatorAllocation  # noqa: F401
from app.models.leave_request import LeaveRequest, LeaveType  # noqa: F401
from app.models.seating_allocation import SeatingAllocation  # noqa: F401
from app.models.timetable import GeneratorKind, Timetable  # noqa: F401
