from task_paths.cli import main

main()
