from . import teacher_attendance, master_teacher_attendance
