#!/usr/bin/env python3
"""
Smoke test for a running signaling endpoint.

Plays both agents against the server with fake session descriptions:
1. Producer resets the session and publishes an offer plus a candidate
2. Consumer waits for the offer, publishes an answer and its own candidate
3. Producer waits for the answer and drains the candidates

Usage:
    python tools/signaling_smoke.py --url http://127.0.0.1:5000 --id smoke-test
"""

import argparse
import os
import sys

# Add project directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "src"))

from signaling.client import SignalingClient, SignalingError


def run_handshake(url: str, connection_id: str, timeout: float) -> bool:
    offer = {"type": "offer", "sdp": "v=0\r\no=- 1 1 IN IP4 127.0.0.1\r\n"}
    answer = {"type": "answer", "sdp": "v=0\r\no=- 2 2 IN IP4 127.0.0.1\r\n"}

    with SignalingClient(url, connection_id, poll_interval=0.2) as producer, \
            SignalingClient(url, connection_id, poll_interval=0.2) as consumer:
        producer.reset()
        producer.publish_offer(offer)
        producer.publish_candidate({"candidate": "candidate:1 1 udp 1 10.0.0.1 5000 typ host"})
        print("✅ Producer published offer")

        received_offer = consumer.wait_for_offer(timeout=timeout)
        if received_offer != offer:
            print(f"❌ Offer mismatch: {received_offer}")
            return False
        consumer.publish_answer(answer)
        consumer.publish_candidate({"candidate": "candidate:2 1 udp 1 10.0.0.2 5001 typ host"})
        print("✅ Consumer received offer and published answer")

        received_answer = producer.wait_for_answer(timeout=timeout)
        if received_answer != answer:
            print(f"❌ Answer mismatch: {received_answer}")
            return False
        candidates = producer.new_candidates()
        print(f"✅ Producer received answer and {len(candidates)} candidate(s)")

        producer.reset()
    return True


def main():
    parser = argparse.ArgumentParser(description="Signaling endpoint smoke test")
    parser.add_argument("--url", default="http://127.0.0.1:5000", help="Server base URL")
    parser.add_argument("--id", default="smoke-test", help="Connection id to use")
    parser.add_argument("--timeout", type=float, default=5.0, help="Seconds to wait for each step")
    args = parser.parse_args()

    try:
        ok = run_handshake(args.url, args.id, args.timeout)
    except SignalingError as e:
        print(f"❌ {e}")
        ok = False
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
