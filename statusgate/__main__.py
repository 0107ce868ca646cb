from statusgate.prober import run

run()
