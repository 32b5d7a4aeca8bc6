"""CoreTex treatment engine.

Builds a treatment plan (dosing schedule, detected drug-drug interactions
and clinical recommendations) for a patient's condition and medications.
"""
