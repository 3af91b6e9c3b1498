"""Value types of the doctor engine."""
