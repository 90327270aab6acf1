# hrms/errors.py


class HRMSError(Exception):
    """Base class for domain errors surfaced to the request layer."""


class EmployeeNotFound(HRMSError):
    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Employee not found: {employee_id}")


class OrganizationNotFound(HRMSError):
    def __init__(self, organization_id: str):
        self.organization_id = organization_id
        super().__init__(f"Organization not found: {organization_id}")


class TaskNotFound(HRMSError):
    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")


class UnsupportedBackend(HRMSError):
    def __init__(self, dialect: str):
        self.dialect = dialect
        super().__init__(f"Score upsert not supported on {dialect}")
