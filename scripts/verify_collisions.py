import httpx
import time
import sys
import subprocess
import os

BASE = "http://127.0.0.1:8080"
API = f"{BASE}/api"

def check_backend():
    try:
        r = httpx.get(f"{BASE}/health", timeout=2)
        return r.status_code == 200
    except httpx.HTTPError:
        return False

def start_backend():
    print("Starting temporary backend...")
    p = subprocess.Popen([sys.executable, "-m", "uvicorn", "satguard.main:app", "--host", "0.0.0.0", "--port", "8080"],
                         cwd=os.path.join(os.getcwd(), "backend"),
                         stdout=subprocess.PIPE,
                         stderr=subprocess.PIPE)
    for i in range(20):
        if check_backend():
            print("Backend started.")
            return p
        time.sleep(1)
    print("Backend failed to start.")
    return None

def verify_collisions():
    r = httpx.post(f"{API}/satellites/load-backup-data", timeout=30)
    print(f"load-backup-data: {r.status_code} {r.json()}")

    start_time = time.time()
    r = httpx.post(f"{API}/satellites/detect-collisions", timeout=60)
    duration = time.time() - start_time
    if r.status_code != 200:
        print(f"Failed: Status {r.status_code}")
        print(r.text)
        return
    print(f"detect-collisions ({duration:.2f}s): {r.json()}")

    active = httpx.get(f"{API}/collisions/active", timeout=10).json()
    for c in active:
        print(f"  {c['riskLevel']:8} {c['satellite1']['name']} <--> {c['satellite2']['name']}: "
              f"{c['minimumDistance']:.3f} km, score {c['probabilityScore']:.1f}")

    distances = [c["minimumDistance"] for c in active]
    if distances == sorted(distances):
        print("[PASS] Active collisions are sorted closest first.")
    else:
        print("[FAIL] Active collisions are NOT sorted by distance.")

    recent = httpx.get(f"{API}/alerts/recent", timeout=10).json()
    print(f"Recent alerts: {len(recent)}")
    if recent:
        alert_id = recent[0]["id"]
        for _ in range(2):
            r = httpx.post(f"{API}/alerts/{alert_id}/acknowledge", timeout=10)
            print(f"acknowledge {alert_id}: {r.status_code} acknowledged={r.json()['acknowledged']}")

    r = httpx.post(f"{API}/satellites/detect-collisions", timeout=60)
    print(f"re-scan: {r.json()}")

if __name__ == "__main__":
    server_process = None
    if not check_backend():
        server_process = start_backend()

    if check_backend():
        verify_collisions()
    else:
        print("Could not connect to backend.")

    if server_process:
        print("Stopping temporary backend...")
        server_process.terminate()
