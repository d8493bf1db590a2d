#!/usr/bin/env python3
"""Simple webhook receiver for testing survey webhook delivery."""

import argparse
import asyncio
import json
from datetime import datetime
from aiohttp import web

# Store received webhooks, keyed by receiver path
received_webhooks = {}


async def webhook(request):
    """Handle survey webhooks on any path under /webhooks/."""
    name = request.match_info["name"]
    raw = await request.text()
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        print(f"\n[{datetime.now()}] Invalid JSON on /webhooks/{name}:")
        print(raw)
        return web.json_response({"status": "invalid json"}, status=400)

    received_webhooks.setdefault(name, []).append(data)
    print(f"\n[{datetime.now()}] Survey Webhook Received on /webhooks/{name}:")
    print(f"  Content-Type: {request.headers.get('Content-Type')}")
    print(f"  Survey: {data.get('survey')}  Response: {data.get('respondId')}  Event: {data.get('event')}")
    print(json.dumps(data, indent=2, ensure_ascii=False))

    # The dispatcher captures this body and shows it in the debug report
    return web.json_response({"status": "ok", "received": len(received_webhooks[name])})


async def fail(request):
    """Always answer 500, for trying out strict status checking."""
    print(f"\n[{datetime.now()}] Failing webhook called")
    return web.json_response({"status": "error"}, status=500)


async def status(request):
    """Return webhook statistics."""
    stats = {
        "receivers": {name: len(items) for name, items in received_webhooks.items()},
        "total": sum(len(v) for v in received_webhooks.values()),
    }
    print(f"\n[{datetime.now()}] Webhook Statistics:")
    print(json.dumps(stats, indent=2))
    return web.json_response(stats)


async def main(host: str, port: int):
    """Run the webhook test server."""
    app = web.Application()
    app.router.add_post("/webhooks/fail", fail)
    app.router.add_post("/webhooks/{name}", webhook)
    app.router.add_get("/status", status)

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    print("=" * 80)
    print("Survey Webhook Test Receiver Started")
    print("=" * 80)
    print(f"Listening on: http://{host}:{port}")
    print("")
    print("Endpoints:")
    print(f"  - Receive:  POST http://{host}:{port}/webhooks/<name>")
    print(f"  - Fail:     POST http://{host}:{port}/webhooks/fail")
    print(f"  - Status:   GET  http://{host}:{port}/status")
    print("")
    print("Configure a survey with:")
    print(f"  survey-webhook settings set-survey <survey_id> --enable --url http://{host}:{port}/webhooks/a")
    print("")
    print("Press Ctrl+C to stop")
    print("=" * 80)

    try:
        while True:
            await asyncio.sleep(3600)
    finally:
        await runner.cleanup()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--host", default="localhost")
    parser.add_argument("--port", type=int, default=9000)
    args = parser.parse_args()

    try:
        asyncio.run(main(args.host, args.port))
    except KeyboardInterrupt:
        print("\nShutting down...")
