"""
Command-line demos for the tape engine.

    scalar-aad shared [--a 5] [--b 10] [--toposort]
        Builds c = (a + b) + ((a + b) + a) = 3a + 2b, runs one reverse pass and
        prints the tape, the expression tree and the gradients (3 and 2). Then
        repeats with a + 1 to show c moving by exactly grad(a).

    scalar-aad xor [--epochs 1000] [--lr 1.5] [--seed 0] [--plot loss.png]
        Trains a 2-4-1 sigmoid MLP on XOR and prints the predictions.
"""

import argparse
from typing import List, Optional

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend
import matplotlib.pyplot as plt

from .aad.core.engine import reverse
from .aad.core.graph_utils import print_graph_summary, print_tape, print_tree
from .aad.core.tape import Tape
from .aad.ops.arithmetic import add, leaf
from .mlp import MLP, MLPConfig

# Input dataset for the XOR problem
XOR_X = [
    [0.0, 0.0],
    [1.0, 0.0],
    [0.0, 1.0],
    [1.0, 1.0],
]

# Ground truth dataset for the XOR problem
XOR_Y = [
    [0.0],
    [1.0],
    [1.0],
    [0.0],
]


def shared_subexpression(a_val: float, b_val: float, strategy: str = "auto", verbose: bool = True):
    """Evaluate and differentiate (a + b) + ((a + b) + a). Returns (c, dc/da, dc/db)."""
    with Tape() as tape:
        a = leaf(tape, a_val)
        b = leaf(tape, b_val)
        s = add(tape, a, b)
        c = add(tape, s, add(tape, s, a))
        reverse(tape, c, strategy=strategy)

        if verbose:
            print_tape(tape)
            print_tree(tape, c)
            print(f"a: data: {tape.value_of(a):f} | grad: {tape.gradient_of(a):f}")
            print(f"b: data: {tape.value_of(b):f} | grad: {tape.gradient_of(b):f}")
            print(f"c: data: {tape.value_of(c):f} | grad: {tape.gradient_of(c):f}")
        return float(tape.value_of(c)), float(tape.gradient_of(a)), float(tape.gradient_of(b))


def plot_loss(history: List[float], save_path: str):
    """Plot the average loss per epoch."""
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.plot(range(1, len(history) + 1), history, 'b-', linewidth=2)
    ax.set_xlabel('Epoch')
    ax.set_ylabel('Average MSE')
    ax.set_yscale('log')
    ax.set_title('XOR training loss')
    ax.grid(True, alpha=0.3)
    plt.tight_layout()
    plt.savefig(save_path, dpi=150, bbox_inches='tight')
    print(f"\nFigure saved to: {save_path}")
    plt.close(fig)


def train_xor(config: MLPConfig, plot_path: Optional[str] = None):
    """Train a 2-4-1 sigmoid MLP on XOR. Returns (model, loss history)."""
    mlp = MLP(config)
    mlp.add_layer(2, 4, "sigm")
    mlp.add_layer(4, 1, "sigm")

    if config.verbose:
        print(mlp.describe())
        print("Training start...")
    history = mlp.train(XOR_X, XOR_Y)
    if config.verbose:
        print("...Training end")
        for x in XOR_X:
            print(f"Prediction for input {{{x[0]:g}, {x[1]:g}}} is {mlp.predict(x)[0]:f}")

    if plot_path:
        plot_loss(history, plot_path)
    return mlp, history


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Scalar tape autodiff demos',
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    sub = parser.add_subparsers(dest='command', required=True)

    p_shared = sub.add_parser('shared', help='gradient of (a+b)+((a+b)+a)',
                              formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    p_shared.add_argument('--a', type=float, default=5.0, help='value of leaf a')
    p_shared.add_argument('--b', type=float, default=10.0, help='value of leaf b')
    p_shared.add_argument('--toposort', action='store_true',
                          help='use the explicit topological sort instead of creation order')
    p_shared.add_argument('--summary', action='store_true', help='print graph statistics')

    p_xor = sub.add_parser('xor', help='train an MLP on XOR',
                           formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    p_xor.add_argument('--epochs', type=int, default=1000, help='training epochs')
    p_xor.add_argument('--lr', type=float, default=1.5, help='learning rate')
    p_xor.add_argument('--seed', type=int, default=None, help='weight initialisation seed')
    p_xor.add_argument('--preallocate', action='store_true',
                       help='allocate layer outputs first (forces the topological sort)')
    p_xor.add_argument('--log-every', type=int, default=100, help='epochs between loss lines')
    p_xor.add_argument('--plot', type=str, default=None, help='save the loss curve to this path')
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    if args.command == 'shared':
        strategy = 'toposort' if args.toposort else 'auto'
        print("=" * 70)
        print("SHARED SUB-EXPRESSION: c = (a + b) + ((a + b) + a)")
        print("=" * 70)
        c0, ga, _ = shared_subexpression(args.a, args.b, strategy)
        print("-" * 70)
        c1, _, _ = shared_subexpression(args.a + 1.0, args.b, strategy, verbose=False)
        print(f"Increasing a from {args.a:g} to {args.a + 1.0:g} moves c from {c0:g} to {c1:g} "
              f"(difference {c1 - c0:g}, grad of a is {ga:g})")
        if args.summary:
            with Tape() as tape:
                a = leaf(tape, args.a)
                b = leaf(tape, args.b)
                s = add(tape, a, b)
                add(tape, s, add(tape, s, a))
                print_graph_summary(tape, detailed=True)
        return 0

    config = MLPConfig(
        learning_rate=args.lr,
        epochs=args.epochs,
        seed=args.seed,
        preallocate=args.preallocate,
        verbose=True,
        log_every=args.log_every,
    )
    train_xor(config, plot_path=args.plot)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
