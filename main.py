import sys
import logging
import argparse
from config import PathConfig, VERSION, NUM_CHUNKS
from core.preprocessing import parse_queries_and_save_to_disk
from core.vectorization import compute_query_vectors_and_save_to_disk

logger = logging.getLogger(__name__)

def build_parser():
    parser = argparse.ArgumentParser(
        description="Tokenize query logs and compute query vectors for nearest-neighbor search"
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {VERSION}")
    parser.add_argument('--verbose', '-v', action='store_true', help='Enable debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    parse = subparsers.add_parser('parse', help='Tokenize a query log into a query dataset')
    parse.add_argument('--queries', default=PathConfig.get_queries_dir(),
                       help='Query log file or directory of parts (.gz parts are decompressed)')
    parse.add_argument('--words', default=PathConfig.get_words_file(),
                       help='Vocabulary, one JSON string per line')
    parse.add_argument('--output', default=PathConfig.get_query_dataset_file(),
                       help='Query dataset file to write')

    vectorize = subparsers.add_parser('vectorize', help='Compute one vector per query')
    vectorize.add_argument('--queries', default=PathConfig.get_query_dataset_file(),
                           help='Query dataset written by the parse command')
    vectorize.add_argument('--word-embeddings', default=PathConfig.get_word_embeddings_file(),
                           help='Word vectors in fvecs format, one per word id')
    vectorize.add_argument('--output', default=PathConfig.get_query_vectors_file(),
                           help='fvecs file to write')
    vectorize.add_argument('--chunks', type=int, default=NUM_CHUNKS,
                           help='Number of sequential chunks (bounds memory use)')

    for subparser in (parse, vectorize):
        subparser.add_argument('--workers', type=int, default=None,
                               help='Worker pool size; default: QUERYVEC_WORKERS or CPU count')
        subparser.add_argument('--no-progress', action='store_true',
                               help='Hide progress bars')
    return parser

def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    show_progress = not args.no_progress

    try:
        if args.command == 'parse':
            parse_queries_and_save_to_disk(
                args.queries, args.words, args.output,
                show_progress=show_progress, max_workers=args.workers
            )
        else:
            compute_query_vectors_and_save_to_disk(
                args.queries, args.word_embeddings, args.output,
                show_progress=show_progress, num_chunks=args.chunks,
                max_workers=args.workers
            )
    except Exception as e:
        # Any failure invalidates the output file
        logger.error(f"{args.command} failed: {e}")
        if args.verbose:
            logger.exception("Traceback:")
        print(f"\n  ❌ {args.command} failed; {args.output} is not valid output")
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
