"""
Main entry point for Solace
Interactive console session against the full support pipeline.
"""
import asyncio
import logging
import os
import uuid

from solace.llm.backend import GroqBackend
from solace.llm.generation_client import GenerationClient
from solace.memory.session_store import InMemorySessionStore
from solace.orchestration.orchestrator import LoggingCrisisSink, SolaceOrchestrator
from config import GROQ_API_KEY, DEFAULT_LANGUAGE


def create_solace(api_key: str = None, debug_mode: bool = False) -> SolaceOrchestrator:
    """
    Create a Solace orchestrator wired to the Groq backend.

    Args:
        api_key: Groq API key (uses env var if not provided)
        debug_mode: Log each pipeline step

    Returns:
        Configured SolaceOrchestrator instance
    """
    api_key = api_key or GROQ_API_KEY
    if not api_key:
        raise ValueError("GROQ_API_KEY must be set in environment or passed as argument")

    print("=" * 60)
    print("🧠 Initializing Solace Mental Health Support")
    print("=" * 60)

    backend = GroqBackend(api_key=api_key)
    orchestrator = SolaceOrchestrator(
        generation_client=GenerationClient(backend),
        store=InMemorySessionStore(),
        crisis_sink=LoggingCrisisSink(),
        debug_mode=debug_mode
    )

    print(f"✅ Solace initialized (model: {backend.model})")
    print("=" * 60 + "\n")
    return orchestrator


async def run_interactive_session(orchestrator: SolaceOrchestrator, language: str = DEFAULT_LANGUAGE):
    """Run an interactive chat session."""
    print("\n🗣️ Starting interactive session...")
    print("Type 'quit' to exit, 'clear' to start over, 'stats' to see system statistics")
    print("-" * 40 + "\n")

    session_id = str(uuid.uuid4())
    orchestrator.store.start_sweeper()
    loop = asyncio.get_running_loop()

    try:
        while True:
            user_input = (await loop.run_in_executor(None, input, "You: ")).strip()

            if not user_input:
                continue

            command = user_input.lower()
            if command == 'quit':
                print("👋 Goodbye! Take care of yourself.")
                break

            if command == 'clear':
                orchestrator.clear_session(session_id)
                session_id = str(uuid.uuid4())
                print("🧹 Started a new session.\n")
                continue

            if command == 'stats':
                _print_stats(orchestrator.get_debug_info(), orchestrator.get_session_summary(session_id))
                continue

            result = await orchestrator.process_message(session_id, user_input, language)
            print(f"\nSolace: {result.text}\n")

            if result.is_crisis and result.crisis_resources:
                print("📞 Resources:")
                for resource in result.crisis_resources:
                    print(f"  • {resource['name']}: {resource['contact']} ({resource['availability']})")
                print()
    except (KeyboardInterrupt, EOFError):
        print("\n👋 Session ended. Goodbye!")
    finally:
        await orchestrator.wait_for_alerts()
        await orchestrator.store.stop_sweeper()


def _print_stats(stats: dict, session: dict = None):
    """Print system statistics."""
    print("\n📈 System Statistics")
    print("-" * 40)

    o = stats.get('orchestrator', {})
    print(f"  Messages Processed: {o.get('messages_processed', 0)}")
    print(f"  Crisis Responses: {o.get('crisis_responses', 0)}")
    print(f"  Fallback Responses: {o.get('fallback_responses', 0)}")

    g = stats.get('generation', {})
    print(f"\n  Upstream Requests: {g.get('total_requests', 0)}")
    print(f"  Upstream Attempts: {g.get('total_attempts', 0)}")
    print(f"  Fallback Rate: {g.get('fallback_rate', 0):.2%}")

    s = stats.get('sessions', {})
    print(f"\n  Active Sessions: {s.get('active_sessions', 0)}")

    if session:
        print(f"  This Session Turns: {session['total_turns']}")
        print(f"  Escalation Level: {session['escalation_level']}")

    print("-" * 40 + "\n")


def main():
    logging.basicConfig(
        level=os.environ.get("LOG_LEVEL", "WARNING"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )

    try:
        solace = create_solace(debug_mode=os.environ.get("SOLACE_DEBUG") == "1")
    except ValueError as e:
        print(f"❌ {e}")
        raise SystemExit(1)

    asyncio.run(run_interactive_session(solace))


if __name__ == "__main__":
    main()
