"""
Cash-Flow Analysis Engine

Modules:
- cashflows: leg inspectors, NPV/BPS, yield NPV/duration/convexity, IRR, z-spread
- cashflow: cash flow / coupon objects + fixed-rate leg builder
- interest_rate: compounding algebra (compound/discount factors, implied rates)
- duration: per-compounding derivative formulas + duration types
- curves: discount curve contract, zero curve, flat forward, zero-spreaded curve
- solvers: bracketing 1-D root finders (Brent, safeguarded Newton)
- reports: pandas cash-flow tables and risk summaries
- settings: evaluation date + numerical defaults
- errors: exception taxonomy
- utils: day counters + schedule helpers

Legs are plain lists of cash flows sorted by payment date.
"""
