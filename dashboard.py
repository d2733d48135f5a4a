# dashboard.py
from html import escape

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from models import STAGES, SpoolConfig
from storage import Storage

app = FastAPI()


def get_storage():
    return Storage(SpoolConfig.from_env())


# ---------- Shared UI ----------
BASE_STYLE = """
  body { font-family: Arial, sans-serif; margin: 0; background: #f9f9f9; color: #333; }
  h1 { background: #2196F3; color: white; padding: 15px; margin: 0; }
  h2 { margin-top: 30px; color: #2196F3; }
  .container { padding: 20px; }
  table { border-collapse: collapse; width: 100%; margin-top: 10px; background: white; }
  th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
  th { background-color: #2196F3; color: white; }
  tr:nth-child(even) { background-color: #f2f2f2; }
  .cards { display: grid; grid-template-columns: repeat(auto-fit,minmax(220px,1fr)); gap: 16px; margin-top: 20px; }
  .card { background: white; border: 1px solid #ddd; border-radius: 6px; padding: 12px; }
  .muted { color: #555; }
"""

def page(title: str, body_html: str) -> str:
    return f"""
    <html>
    <head>
      <title>{title}</title>
      <style>{BASE_STYLE}</style>
    </head>
    <body>
      <h1>{title}</h1>
      <div class="container">
        {body_html}
      </div>
    </body>
    </html>
    """

def stage_jobs(db):
    """One directory scan per stage; counts and tables are built from it."""
    try:
        return {stage: db.list_jobs(stage) for stage in STAGES}
    except FileNotFoundError as e:
        raise HTTPException(status_code=503, detail=f"spool directory missing: {e.filename}") from e

def average_elapsed(out_jobs):
    elapsed = [j.elapsed_seconds for j in out_jobs if j.elapsed_seconds is not None]
    return sum(elapsed) / len(elapsed) if elapsed else None

# ---------- Home ----------
@app.get("/", response_class=HTMLResponse)
def home(db: Storage = Depends(get_storage)):
    by_stage = stage_jobs(db)
    body = '<div class="cards">'
    for stage in STAGES:
        body += f'<div class="card"><h3>{stage}</h3><p>{len(by_stage[stage])}</p></div>'
    body += "</div>"

    for stage in STAGES:
        jobs = by_stage[stage]
        body += f"<h2>{stage}</h2><table><tr><th>Name</th><th>Job</th><th>Machine</th><th>Stamped</th><th>Elapsed</th><th>Log</th></tr>"
        if not jobs:
            body += "</table><p class='muted'>Empty.</p>"
            continue
        for j in jobs:
            stamped = j.stamped_at.isoformat() if j.stamped_at else "-"
            elapsed = f"{j.elapsed_seconds:.0f}s" if j.elapsed_seconds is not None else "-"
            work_name = {"work": j.name, "out": j.base_name}.get(stage)
            log = f"<a href='/job/{escape(work_name)}/log'>log</a>" if work_name else "-"
            body += (
                f"<tr><td>{escape(j.name)}</td><td>{escape(j.origin_name)}</td><td>{escape(j.machine or '-')}</td>"
                f"<td>{stamped}</td><td>{elapsed}</td><td>{log}</td></tr>"
            )
        body += "</table>"

    return page(f"📊 Spool {escape(str(db.config.root))}", body)

# ---------- Metrics (JSON) ----------
@app.get("/metrics/json", response_class=JSONResponse)
def metrics_json(db: Storage = Depends(get_storage)):
    by_stage = stage_jobs(db)
    counts = {stage: len(jobs) for stage, jobs in by_stage.items()}
    return {**counts, "avg_elapsed": average_elapsed(by_stage["out"])}

# ---------- Run log ----------
@app.get("/job/{work_name}/log", response_class=PlainTextResponse)
def job_log(work_name: str, db: Storage = Depends(get_storage)):
    text = db.read_log(work_name)
    if text is None:
        raise HTTPException(status_code=404, detail=f"no log for {work_name}")
    return PlainTextResponse(text or "(no output)", media_type="text/plain")
