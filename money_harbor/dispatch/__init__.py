"""
Report dispatch: email a PDF report with lead capture, and send reminder
confirmations.  See ``report_dispatcher``.
"""
