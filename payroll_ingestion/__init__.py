"""
payroll_ingestion -- Moving payroll records in and out of files.

Employee CSV export/import and the JSON backup file.  Parsing is pure
(no session); the services in ``payroll_ingestion.services`` write the
parsed records through the kernel services.
"""
