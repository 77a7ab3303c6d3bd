from typing import List

genders: dict[str, str] = {
    'male': 'Male',
    'female': 'Female',
    'other': 'Other',
}

experience_levels: dict[str, str] = {
    'beginner': 'Beginner (0-2 years)',
    'intermediate': 'Intermediate (2-5 years)',
    'experienced': 'Experienced (5+ years)',
}

visa_types: List[str] = [
    'Employment Visa',
    'Work Permit',
    'Business Visa',
    'Residence Visa',
    'Temporary Work Visa',
    'Other'
]

contract_statuses: dict[str, str] = {
    'pending': 'Pending Approval',
    'approved': 'Approved',
    'rejected': 'Rejected',
    'under_review': 'Under Review',
    'issued': 'Visa Issued',
}

elmis_statuses: dict[str, str] = {
    'checked': 'Checked',
    'issued': 'Issued',
    'verified': 'Verified (with QR)',
    'rejected': 'Rejected',
    'pending': 'Pending',
}

ticket_statuses: dict[str, str] = {
    'not_booked': 'Not Booked',
    'booked': 'Booked',
    'issued': 'Issued',
    'cancelled': 'Cancelled',
    'confirmed': 'Confirmed',
}

currencies: dict[str, str] = {
    'USD': 'US Dollar ($)',
    'EUR': 'Euro (€)',
    'GBP': 'British Pound (£)',
    'AUD': 'Australian Dollar (A$)',
    'CAD': 'Canadian Dollar (C$)',
    'NPR': 'Nepalese Rupee (₨)',
    'QAR': 'Qatari Riyal (﷼)',
    'SAR': 'Saudi Riyal (﷼)',
    'AED': 'UAE Dirham (د.إ)',
}

pregnancy_test_statuses: dict[str, str] = {
    'not_tested': 'Not Tested',
    'tested': 'Test Completed',
    'exempt': 'Exempt',
}

pregnancy_results: dict[str, str] = {
    'negative': 'Negative',
    'positive': 'Positive',
    'inconclusive': 'Inconclusive',
}

# Accepted by the document inputs on the intake screens.
document_media_types: List[str] = [
    'image/jpeg',
    'image/png',
    'application/pdf',
]

photo_media_types: List[str] = [
    'image/jpeg',
    'image/png',
]
