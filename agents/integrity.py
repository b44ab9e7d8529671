"""
Ledger Integrity Checks
=======================
Two read-only agents that re-derive the ledger's balances from its raw rows
and compare them with what the store reports, producing a 0-100 score.

  Agent 1 — Cash & Loans   (50 pts)
  Agent 2 — Stock & HPP    (50 pts)

Neither agent mutates the store. Any CRITICAL failure caps the score at 49.
"""

import threading
import time
from collections import defaultdict
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone

from bukukas.models import TransactionCategory, ProductionStatus

MONEY_TOL = 0.01
QTY_TOL = 1e-6


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass
class CheckResult:
    name: str               # e.g. "loan_balances"
    status: str             # PASS | FAIL | WARN | SKIP
    message: str            # Human-readable
    severity: str           # CRITICAL | HIGH | MEDIUM | LOW | INFO
    source_value: float = 0.0
    expected_value: float = 0.0
    delta: float = 0.0
    tolerance: float = 0.0
    offenders: list = field(default_factory=list)


@dataclass
class AgentMessage:
    agent_name: str
    agent_id: int
    timestamp: str = ""
    checks: list = field(default_factory=list)
    summary: dict = field(default_factory=dict)
    findings: list = field(default_factory=list)

    def __post_init__(self):
        if not self.timestamp:
            self.timestamp = datetime.now(timezone.utc).isoformat()


def _compare(name, actual, expected, tol, severity, label):
    delta = round(abs(actual - expected), 6)
    return CheckResult(
        name=name, status="PASS" if delta <= tol else "FAIL",
        message=f"{label}: {round(actual, 2)} vs {round(expected, 2)}, delta={delta}",
        severity=severity, source_value=actual, expected_value=expected,
        delta=delta, tolerance=tol)


def _per_record(name, offenders, total, severity, what):
    if not total:
        return CheckResult(name=name, status="SKIP", message=f"No {what} to check", severity=severity)
    if offenders:
        return CheckResult(
            name=name, status="FAIL", severity=severity, offenders=offenders[:20],
            message=f"{len(offenders)} of {total} {what} inconsistent")
    return CheckResult(name=name, status="PASS", severity=severity,
                       message=f"All {total} {what} consistent")


class _Agent:
    agent_id = 0
    agent_name = ""

    def _wrap(self, checks):
        passed = sum(1 for c in checks if c.status == "PASS")
        failed = sum(1 for c in checks if c.status == "FAIL")
        warned = sum(1 for c in checks if c.status == "WARN")
        skipped = sum(1 for c in checks if c.status == "SKIP")
        findings = [f"[{c.status}] {c.name}: {c.message}" for c in checks if c.status in ("FAIL", "WARN")]
        return AgentMessage(
            agent_name=self.agent_name, agent_id=self.agent_id,
            checks=[asdict(c) for c in checks],
            summary={"total": len(checks), "passed": passed, "failed": failed,
                     "warned": warned, "skipped": skipped},
            findings=findings)


# ---------------------------------------------------------------------------
# Agent 1: Cash & Loans (50 points)
# ---------------------------------------------------------------------------

class CashLoanAgent(_Agent):
    agent_id = 1
    agent_name = "CashLoanAgent"

    def run(self, store) -> AgentMessage:
        checks = [
            self._cash_split(store),
            self._loan_balances(store),
            self._net_wealth_identity(store),
            self._orphan_transactions(store),
        ]
        return self._wrap(checks)

    def _cash_split(self, store):
        s = store.summary()
        return _compare("cash_split", s["cash_only"] + s["bank_only"], s["total_cash"],
                        MONEY_TOL, "CRITICAL", "cash + bank vs total cash")

    def _loan_balances(self, store):
        repaid = defaultdict(float)
        for t in store.transactions:
            if t.category == TransactionCategory.LOAN_REPAYMENT and t.related_id:
                repaid[t.related_id] += t.amount
        offenders = []
        for loan in store.loans:
            expected = loan.initial_amount - repaid[loan.id]
            if abs(loan.remaining_amount - expected) > MONEY_TOL or loan.remaining_amount < -MONEY_TOL:
                offenders.append({"loan_id": loan.id, "source": loan.source,
                                  "remaining": loan.remaining_amount, "expected": expected})
        return _per_record("loan_balances", offenders, len(store.loans), "CRITICAL", "loans")

    def _net_wealth_identity(self, store):
        s = store.summary()
        expected = s["total_cash"] + s["total_inventory_value"] - s["total_debt"]
        return _compare("net_wealth_identity", s["net_wealth"], expected,
                        MONEY_TOL, "HIGH", "net wealth vs cash + stock - debt")

    def _orphan_transactions(self, store):
        known = ({l.id for l in store.loans} | {b.id for b in store.batches}
                 | {s.id for s in store.sales} | {p.id for p in store.productions})
        locked = [t for t in store.transactions if t.related_id]
        offenders = [{"transaction_id": t.id, "related_id": t.related_id, "description": t.description}
                     for t in locked if t.related_id not in known]
        return _per_record("orphan_transactions", offenders, len(locked), "MEDIUM", "locked transactions")


# ---------------------------------------------------------------------------
# Agent 2: Stock & HPP (50 points)
# ---------------------------------------------------------------------------

class StockHppAgent(_Agent):
    agent_id = 2
    agent_name = "StockHppAgent"

    def run(self, store) -> AgentMessage:
        checks = [
            self._batch_bounds(store),
            self._batch_consumption(store),
            self._locked_hpp(store),
            self._finished_batches(store),
            self._sale_cogs(store),
        ]
        return self._wrap(checks)

    def _batch_bounds(self, store):
        offenders = [{"batch_id": b.id, "product_name": b.product_name,
                      "current": b.current_quantity, "initial": b.initial_quantity}
                     for b in store.batches
                     if b.current_quantity < -QTY_TOL or b.current_quantity > b.initial_quantity + QTY_TOL]
        return _per_record("batch_bounds", offenders, len(store.batches), "CRITICAL", "batches")

    def _batch_consumption(self, store):
        used = defaultdict(float)
        for u in list(store.production_usages) + list(store.sale_usages):
            used[u.batch_id] += u.quantity_used
        offenders = []
        for b in store.batches:
            consumed = b.initial_quantity - b.current_quantity
            if abs(consumed - used[b.id]) > QTY_TOL:
                offenders.append({"batch_id": b.id, "product_name": b.product_name,
                                  "consumed": consumed, "recorded_usage": used[b.id]})
        return _per_record("batch_consumption", offenders, len(store.batches), "CRITICAL", "batches")

    def _locked_hpp(self, store):
        offenders = []
        for p in store.productions:
            material = sum(u.quantity_used * u.cost_per_unit for u in store.production_usages_for(p.id))
            costs = sum(t.amount for t in store.production_costs(p.id))
            if abs(p.total_hpp - (material + costs)) > MONEY_TOL:
                offenders.append({"production_id": p.id, "output": p.output_product_name,
                                  "total_hpp": p.total_hpp, "expected": material + costs})
        return _per_record("locked_hpp", offenders, len(store.productions), "HIGH", "productions")

    def _finished_batches(self, store):
        finished = defaultdict(int)
        for b in store.batches:
            if b.production_id:
                finished[b.production_id] += 1
        offenders = []
        for p in store.productions:
            expected = 1 if p.status == ProductionStatus.COMPLETED else 0
            if finished[p.id] != expected:
                offenders.append({"production_id": p.id, "status": p.status,
                                  "finished_batches": finished[p.id]})
        return _per_record("finished_batches", offenders, len(store.productions), "HIGH", "productions")

    def _sale_cogs(self, store):
        cogs = defaultdict(float)
        for u in store.sale_usages:
            cogs[u.sale_id] += u.quantity_used * u.cost_per_unit
        offenders = [{"sale_id": s.id, "cogs": s.cogs, "expected": cogs[s.id]}
                     for s in store.sales if abs(s.cogs - cogs[s.id]) > MONEY_TOL]
        return _per_record("sale_cogs", offenders, len(store.sales), "MEDIUM", "sales")


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

AGENT_WEIGHTS = {
    1: {"total": 50, "breakdown": {
        "cash_split": 15, "loan_balances": 15, "net_wealth_identity": 10, "orphan_transactions": 10,
    }},
    2: {"total": 50, "breakdown": {
        "batch_bounds": 10, "batch_consumption": 15, "locked_hpp": 10,
        "finished_batches": 10, "sale_cogs": 5,
    }},
}


def score_report(messages) -> dict:
    """Turn agent messages into the scored report."""
    by_id = {m.agent_id: m for m in messages}
    score = 0.0
    agent_scores = {}
    all_checks = []
    has_critical_fail = False

    for agent_id, weight_info in AGENT_WEIGHTS.items():
        msg = by_id.get(agent_id)
        if msg is None:
            agent_scores[agent_id] = {"earned": 0, "max": weight_info["total"], "pct": 0}
            continue
        earned = 0.0
        for check in msg.checks:
            max_pts = weight_info["breakdown"].get(check["name"], 0)
            all_checks.append(check)
            # SKIP means there was nothing to check
            if check["status"] in ("PASS", "SKIP"):
                earned += max_pts
            elif check["status"] == "WARN":
                earned += max_pts * 0.5
            if check["status"] == "FAIL" and check["severity"] == "CRITICAL":
                has_critical_fail = True
        agent_scores[agent_id] = {
            "earned": round(earned, 1),
            "max": weight_info["total"],
            "pct": round(earned / weight_info["total"] * 100, 1) if weight_info["total"] > 0 else 0,
        }
        score += earned

    # VETO: any CRITICAL FAIL caps at 49
    if has_critical_fail and score > 49:
        score = 49.0
    score = round(score, 1)

    if score >= 90:
        grade = "A"
    elif score >= 75:
        grade = "B"
    elif score >= 50:
        grade = "C"
    elif score >= 25:
        grade = "D"
    else:
        grade = "F"

    findings = []
    for msg in messages:
        findings.extend(msg.findings)

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "score": score,
        "grade": grade,
        "veto_applied": has_critical_fail,
        "total_checks": len(all_checks),
        "passed": sum(1 for c in all_checks if c["status"] == "PASS"),
        "failed": sum(1 for c in all_checks if c["status"] == "FAIL"),
        "warned": sum(1 for c in all_checks if c["status"] == "WARN"),
        "agent_scores": agent_scores,
        "findings": findings,
        "agents": {m.agent_id: {
            "name": m.agent_name,
            "timestamp": m.timestamp,
            "summary": m.summary,
            "checks": m.checks,
        } for m in messages},
    }


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

_LATEST_REPORT: dict = {}
_REPORT_LOCK = threading.Lock()


def run_integrity(store=None, trigger="manual", record=True) -> dict:
    """Run both agents against the store and return the scored report."""
    global _LATEST_REPORT
    if store is None:
        from bukukas.data_state import get_store
        store = get_store()
    t_start = time.time()

    messages = []
    for agent in (CashLoanAgent(), StockHppAgent()):
        try:
            messages.append(agent.run(store))
        except Exception as e:
            messages.append(AgentMessage(
                agent_name=agent.agent_name, agent_id=agent.agent_id,
                checks=[asdict(CheckResult(name="agent_crash", status="FAIL",
                                           message=f"Agent crashed: {type(e).__name__}: {e}",
                                           severity="CRITICAL"))],
                summary={"total": 1, "passed": 0, "failed": 1, "warned": 0, "skipped": 0},
                findings=[f"[FAIL] Agent {agent.agent_name} crashed: {e}"]))

    report = score_report(messages)
    report["trigger"] = trigger
    report["duration_seconds"] = round(time.time() - t_start, 3)

    with _REPORT_LOCK:
        _LATEST_REPORT = report

    if record:
        # Persist to the config table (background thread to avoid blocking)
        def _persist():
            try:
                from supabase_loader import save_config_value
                save_config_value("integrity_last_report", report)
                save_config_value("integrity_last_score", {
                    "score": report["score"], "grade": report["grade"],
                    "timestamp": report["timestamp"],
                })
            except Exception as e:
                print(f"  Integrity report not saved: {e}")
        threading.Thread(target=_persist, daemon=True).start()

    return report


def latest_report() -> dict:
    with _REPORT_LOCK:
        return dict(_LATEST_REPORT)


# ---------------------------------------------------------------------------
# Flask API routes
# ---------------------------------------------------------------------------

def register_integrity_routes(server):
    """Register integrity API endpoints on the Flask server."""
    import flask

    @server.route("/api/integrity/run", methods=["GET", "POST"])
    def api_integrity_run():
        try:
            return flask.jsonify(run_integrity(trigger="api"))
        except Exception as e:
            return flask.jsonify({"error": str(e)}), 500

    @server.route("/api/integrity/report")
    def api_integrity_report():
        report = latest_report()
        if report:
            return flask.jsonify(report)
        try:
            from supabase_loader import get_config_value
            saved = get_config_value("integrity_last_report")
        except Exception as e:
            return flask.jsonify({"error": str(e)}), 500
        if saved:
            return flask.jsonify(saved)
        return flask.jsonify({"error": "No integrity report available. POST /api/integrity/run first."}), 404
