from pydantic import BaseModel
from typing import Optional

class PatientSnapshot(BaseModel):
    id: Optional[str] = None
    mrn: Optional[str] = None
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None

class DoctorSnapshot(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    department: Optional[str] = None
