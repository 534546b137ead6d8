"""
XOR Problem Implementation for NEAT

This script evolves a network solving the classic XOR (exclusive OR) problem,
the minimal benchmark for topology-evolving algorithms: XOR is not linearly
separable, so a solution needs at least one hidden node.

        Input (0, 0) → Output 0
        Input (0, 1) → Output 1
        Input (1, 0) → Output 1
        Input (1, 1) → Output 0

Fitness Function:
    Fitness = (4.0 - Σ|expected - actual|) / 4.0

    The fitness lies in [0, 1]; a fitness of 1.0 means all four cases are exact.

Usage:
    python examples/trial_XOR.py --config examples/config_xor.ini --seed 42
"""

import argparse
from pathlib import Path

from loguru import logger

from neatevo           import Config, Genome, Trainer
from neatevo.phenotype import to_dot

XOR_CASES = [((0.0, 0.0), 0.0),
             ((0.0, 1.0), 1.0),
             ((1.0, 0.0), 1.0),
             ((1.0, 1.0), 0.0)]

def xor_fitness(index: int, genome: Genome) -> float:
    """
    Test the genome's network on all 4 XOR cases.
    """
    error = sum(abs(expected - genome.simulate(inputs)[0]) for inputs, expected in XOR_CASES)
    return (4.0 - error) / 4.0

def main():
    parser = argparse.ArgumentParser(description='Evolve a network solving XOR')
    parser.add_argument('--config', type=str, default=str(Path(__file__).parent / 'config_xor.ini'),
                        help='Path to the INI configuration file')
    parser.add_argument('--seed', type=int, default=None,
                        help='Seed of the random generator')
    parser.add_argument('--jobs', type=int, default=1,
                        help='Number of threads evaluating fitness')
    parser.add_argument('--dot', type=str, default=None,
                        help='Write the DOT description of the best network to this file')
    args = parser.parse_args()

    config  = Config(args.config)
    trainer = Trainer(config, seed=args.seed)
    best    = trainer.run(xor_fitness, num_jobs=args.jobs)

    logger.info("Best fitness {:.4f} after {} generations ({} species)",
                trainer.best_fitness, trainer.generation, len(trainer.species))
    for inputs, expected in XOR_CASES:
        logger.info("  input {} expected {:.1f} got {:.4f}", inputs, expected, best.simulate(inputs)[0])

    if args.dot:
        Path(args.dot).write_text(to_dot(best))
        logger.info("Network description saved to {}", args.dot)


if __name__ == '__main__':
    main()
