import json, urllib.request
from ..config import Settings
from .personas import reader, bouncer, contact_submitter


def post_one(url, ev):
    data = json.dumps(ev).encode("utf-8")
    req = urllib.request.Request(url, data=data, headers={"Content-Type": "application/json"})
    with urllib.request.urlopen(req) as r:
        r.read()


def main():
    url = Settings.from_env().seed_url
    events = []
    for _ in range(3):
        events += reader()
    events += bouncer() + bouncer(device="tablet")
    events += contact_submitter()
    # the API takes one event per request
    for ev in events:
        post_one(url, ev)
    print(f"Seeded {len(events)} events across 3 personas → {url}")


if __name__ == "__main__":
    main()
