"""School attendance package.

Organized by feature modules (users, students, courses, attendance, excuses, ...)
with a thin Flask controller layer over service/repository layers.
"""
