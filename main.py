import argparse
import asyncio
import sys
import threading
import time

from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from config.config import SearchMode
from orchestrator.core import SearchOrchestrator
from utils.errors import InvalidRequestError


def show_loading_animation(stop_event: threading.Event) -> None:
    """
    Show a loading animation in the console.

    Args:
        stop_event: A threading.Event that will be set to stop the animation
    """
    while not stop_event.is_set():
        for char in '|/-\\':
            if stop_event.is_set():
                break
            sys.stdout.write(f'\r\033[93mSearching {char}\033[0m')
            sys.stdout.flush()
            time.sleep(0.1)

    # Clear the loading line
    sys.stdout.write('\r' + ' ' * 20 + '\r')
    sys.stdout.flush()


def print_outcome(outcome) -> None:
    if outcome.llm_response:
        label = "synthesized" if outcome.llm_response.synthesized else outcome.llm_response.model
        print(f"\n=== Answer ({label}) ===\n")
        print(outcome.llm_response.answer)

    print("\n=== Categories ===")
    for category in outcome.categories:
        print(f"- {category.name} ({len(category.content)} results, overall {category.metrics.overall:.2f})")
        for result in category.content[:3]:
            print(f"    {result.title} <{result.url}>")

    print(f"\n{len(outcome.results)} results", end="")
    if outcome.failed_sources:
        print(f", failed sources: {', '.join(outcome.failed_sources)}", end="")
    print()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Run one search from the terminal")
    parser.add_argument("query", nargs="+", help="Search query")
    parser.add_argument("--model", default=None, help="Model id or alias (default from config/models.yaml)")
    parser.add_argument("--mode", choices=[m.value for m in SearchMode], default=SearchMode.VERIFIED.value)
    parser.add_argument("--sources", default="Web", help="Comma-separated sources, e.g. Web,LinkedIn,Reddit")
    parser.add_argument("--no-llm", action="store_true", help="Skip the LLM answer")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    orchestrator = SearchOrchestrator()

    stop_animation = threading.Event()
    loading_thread = threading.Thread(target=show_loading_animation, args=(stop_animation,))
    loading_thread.daemon = True
    loading_thread.start()

    try:
        outcome = asyncio.run(
            orchestrator.search(
                " ".join(args.query),
                mode=SearchMode(args.mode),
                model=args.model,
                sources=[s.strip() for s in args.sources.split(",") if s.strip()],
                use_llm=not args.no_llm,
            )
        )
    except InvalidRequestError as e:
        print(f"\nError: {e.message}")
        return 2
    except KeyboardInterrupt:
        print("\nExiting...")
        return 130
    finally:
        stop_animation.set()
        loading_thread.join()

    print_outcome(outcome)
    return 0


if __name__ == "__main__":
    sys.exit(main())
