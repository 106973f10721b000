from college_admin.core.models.stream import Stream
from college_admin.core.models.course import Course
from college_admin.core.models.academic_year import AcademicYear
from college_admin.core.models.semester import Semester
from college_admin.core.models.subject import Subject
from college_admin.core.models.course_fee import CourseFee
from college_admin.core.models.student import Student
from college_admin.core.models.student_academic_year import StudentAcademicYear
from college_admin.core.models.student_semester import StudentSemester
from college_admin.core.models.student_payment import StudentPayment
from college_admin.core.models.branch_transfer import BranchTransfer
from college_admin.core.models.custom_field import CustomFieldDefinition, StudentCustomField

__all__ = [
    "AcademicYear",
    "BranchTransfer",
    "Course",
    "CourseFee",
    "CustomFieldDefinition",
    "Semester",
    "Stream",
    "Student",
    "StudentAcademicYear",
    "StudentCustomField",
    "StudentPayment",
    "StudentSemester",
    "Subject",
]
