"""
Finals exam schedule ingestion: registrar PDF text -> FinalExam rows per term.
"""
